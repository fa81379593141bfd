# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — Processing Modules
  preprocessing  upload / form validation
  slicing        grid computation + crop∘encode per tile
  export         ZIP archive of the tiles
  publishing     X OAuth (PKCE), API client, grid publisher
"""
