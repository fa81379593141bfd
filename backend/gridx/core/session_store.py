# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — Abstract SessionStore
Narrow key-value interface over per-browser session state.
Swap InMemorySessionStore for RedisSessionStore with zero handler changes.

InMemorySessionStore  — development / single-worker deployments
RedisSessionStore     — production / multi-worker / serverless deployments
"""

from __future__ import annotations

import secrets
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from gridx.models.session import SessionData
from gridx.utils.logger import get_logger

log = get_logger(__name__)


def new_session_id() -> str:
    """Opaque, unguessable session id for the session cookie."""
    return secrets.token_urlsafe(32)


# ─── Abstract Interface ──────────────────────────────────────────────────────

class SessionStore(ABC):
    """
    Abstract base class for all session backends.
    All methods are synchronous.
    """

    @abstractmethod
    def get(self, session_id: str) -> Optional[SessionData]:
        """Return SessionData by ID, or None if absent or expired."""

    @abstractmethod
    def set(self, session_id: str, data: SessionData) -> None:
        """Create or replace the session record."""

    @abstractmethod
    def destroy(self, session_id: str) -> None:
        """Remove the session record. No-op if it does not exist."""


# ─── In-Memory Implementation ────────────────────────────────────────────────

class InMemorySessionStore(SessionStore):
    """
    Thread-safe in-memory session store using a dict + RLock.
    Entries carry an expiry deadline when ttl_seconds is set; expired
    entries are dropped on read and swept on every write.
    """

    def __init__(
        self,
        ttl_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store: dict[str, tuple[Optional[float], SessionData]] = {}
        self._lock = threading.RLock()
        self._ttl = ttl_seconds
        self._clock = clock

    def _expired(self, deadline: Optional[float]) -> bool:
        return deadline is not None and self._clock() >= deadline

    def _sweep(self) -> None:
        stale = [sid for sid, (deadline, _) in self._store.items() if self._expired(deadline)]
        for sid in stale:
            del self._store[sid]
        if stale:
            log.debug("sessions_expired", backend="memory", count=len(stale))

    def get(self, session_id: str) -> Optional[SessionData]:
        with self._lock:
            entry = self._store.get(session_id)
            if entry is None:
                return None
            deadline, data = entry
            if self._expired(deadline):
                del self._store[session_id]
                return None
            # Copy so callers never mutate the stored record in place
            return data.model_copy(deep=True)

    def set(self, session_id: str, data: SessionData) -> None:
        with self._lock:
            self._sweep()
            deadline = self._clock() + self._ttl if self._ttl is not None else None
            self._store[session_id] = (deadline, data.model_copy(deep=True))
        log.debug("session_saved", backend="memory")

    def destroy(self, session_id: str) -> None:
        with self._lock:
            self._store.pop(session_id, None)
        log.debug("session_destroyed", backend="memory")

    def count(self) -> int:
        """Return the number of live sessions (useful for health checks)."""
        with self._lock:
            self._sweep()
            return len(self._store)


# ─── Redis Implementation ────────────────────────────────────────────────────

class RedisSessionStore(SessionStore):
    """
    Redis-backed session store.
    Sessions are JSON-serialised and stored with TTL expiry; the TTL is
    refreshed on every write.
    """

    def __init__(self, redis_url: str, ttl_seconds: int = 86400) -> None:
        try:
            import redis as redis_lib
        except ImportError as e:
            raise ImportError(
                "redis package required for RedisSessionStore. "
                "Install with: pip install redis"
            ) from e

        self._client = redis_lib.from_url(redis_url, decode_responses=True)
        self._ttl = ttl_seconds
        self._prefix = "gridx:sess:"

        # Verify connection on init
        self._client.ping()
        log.info("redis_session_store_connected", url=redis_url)

    def _key(self, session_id: str) -> str:
        return f"{self._prefix}{session_id}"

    def get(self, session_id: str) -> Optional[SessionData]:
        raw = self._client.get(self._key(session_id))
        if raw is None:
            return None
        return SessionData.model_validate_json(raw)

    def set(self, session_id: str, data: SessionData) -> None:
        self._client.setex(self._key(session_id), self._ttl, data.model_dump_json())
        log.debug("session_saved", backend="redis")

    def destroy(self, session_id: str) -> None:
        self._client.delete(self._key(session_id))
        log.debug("session_destroyed", backend="redis")
