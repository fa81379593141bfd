# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — Structured Logging
structlog with JSON output (console output at DEBUG). Every entry for one
request carries the same request_id, bound by the HTTP middleware through
bind_request_context(). OAuth credentials are masked before rendering so
provider bodies and session fields can be logged as-is.
"""

import logging
import sys
import uuid
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

from gridx.config import get_settings

# Keys whose values are credentials; matched case-insensitively at any depth
SENSITIVE_KEYS = frozenset({
    "access_token",
    "refresh_token",
    "code_verifier",
    "client_secret",
    "authorization",
    "cookie",
})
REDACTED = "***"


def _redact(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            k: REDACTED if str(k).lower() in SENSITIVE_KEYS else _redact(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_redact(v) for v in value]
    return value


def redact_credentials(logger: Any, method: str, event_dict: EventDict) -> EventDict:
    """Mask OAuth tokens, verifiers and auth headers anywhere in the entry."""
    return _redact(event_dict)


def _add_service(logger: Any, method: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", "gridx")
    return event_dict


def _drop_color_message_key(
    logger: Any, method: str, event_dict: EventDict
) -> EventDict:
    """Remove uvicorn's color_message."""
    event_dict.pop("color_message", None)
    return event_dict


def build_processors(log_level: str) -> list[Processor]:
    """Processor chain for the given level name. DEBUG renders for the console."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _add_service,
        _drop_color_message_key,
        redact_credentials,
    ]
    if log_level == "DEBUG":
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors += [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    return processors


def configure_logging() -> None:
    """Configure structlog and the stdlib root logger. Called once at startup."""
    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    structlog.configure(
        processors=build_processors(settings.log_level),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stdout),
        cache_logger_on_first_use=True,
    )

    # stdlib passthrough for uvicorn / fastapi
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    # httpx logs every request URL at INFO, including OAuth redirects
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


# ─── Request Context ─────────────────────────────────────────────────────────

def bind_request_context(
    method: str,
    path: str,
    request_id: Optional[str] = None,
) -> str:
    """
    Bind request_id / method / path for every entry logged while handling
    this request. Returns the request_id (generated when not supplied).
    """
    request_id = request_id or uuid.uuid4().hex[:12]
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=request_id,
        method=method,
        path=path,
    )
    return request_id


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str = "gridx") -> structlog.BoundLogger:
    """
    Usage:
        log = get_logger(__name__)
        log.info("tile_uploaded", row=0, col=1, media_id="123")
    """
    return structlog.get_logger(name)
