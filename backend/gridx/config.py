# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — Application Configuration
All settings are loaded from environment variables with local-development
defaults. Override via backend/.env or environment.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ─── Runtime ─────────────────────────────────────────────────────────────
    environment: Literal["development", "production", "test"] = "development"

    # ─── Frontend / Session Cookie ───────────────────────────────────────────
    frontend_url: str = "http://localhost:3000"
    session_cookie_name: str = "gridx_sid"
    session_ttl_seconds: int = 86400  # 24 hours

    # ─── Session Store ───────────────────────────────────────────────────────
    session_store_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379/0"

    # ─── Upload ──────────────────────────────────────────────────────────────
    upload_max_mb: int = 10

    # ─── Grid / Export ───────────────────────────────────────────────────────
    # Used when the form omits rows or cols
    default_grid_dim: int = 3
    # Lossy encoding for post uploads, tuned for upload size
    jpeg_quality: int = 90
    zip_compress_level: int = 9

    # ─── Post ────────────────────────────────────────────────────────────────
    default_caption: str = "Check out this cool image grid! 🖼️"

    # ─── X OAuth2 / API ──────────────────────────────────────────────────────
    x_client_id: str = ""
    x_client_secret: str = ""
    callback_url: str = "http://localhost:5000/api/auth/callback"
    x_authorize_url: str = "https://twitter.com/i/oauth2/authorize"
    x_token_url: str = "https://api.twitter.com/2/oauth2/token"
    x_user_url: str = "https://api.twitter.com/2/users/me"
    x_media_upload_url: str = "https://upload.twitter.com/1.1/media/upload.json"
    x_post_url: str = "https://api.twitter.com/2/tweets"
    x_scopes: str = "tweet.read tweet.write users.read offline.access"

    # ─── Outbound HTTP ───────────────────────────────────────────────────────
    http_timeout_seconds: float = 30.0

    # ─── Logging ─────────────────────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # ─── Server ──────────────────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 5000

    # ─── Derived helpers ─────────────────────────────────────────────────────
    @property
    def upload_max_bytes(self) -> int:
        return self.upload_max_mb * 1024 * 1024

    @property
    def expose_error_details(self) -> bool:
        return self.environment != "production"

    @property
    def cookie_secure(self) -> bool:
        return self.environment == "production"

    @property
    def x_credentials_configured(self) -> bool:
        return bool(self.x_client_id and self.x_client_secret)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached singleton Settings instance."""
    return Settings()
