"""
NATIVE SESSION
==============
Server-side session primitives consumed by the session handler.

FLOW:
- NativeSessionMiddleware loads a NativeSession for every request.
- The handler starts, regenerates or destroys it.
- The middleware persists it and writes the cookie once the endpoint returns.

HOW:
- Session data lives in a MemorySessionBackend keyed by session id.
- Cookie instructions are recorded and applied to the response later.
"""

from __future__ import annotations

import logging
import secrets
import threading
import time
from typing import Any, Callable, Dict, Optional

from cachetools import TTLCache

from Sessions.errors import SessionStartError


logger = logging.getLogger(__name__)


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


class MemorySessionBackend:
    """In-process session storage using cachetools TTLCache.

    Entries expire max_age_seconds after their last save; at most
    max_entries sessions are kept.
    """

    def __init__(
        self,
        max_age_seconds: int = 60 * 60 * 8,
        max_entries: int = 10_000,
        clock: Callable[[], float] = time.time,
    ):
        self.max_age_seconds = max_age_seconds
        ttl = max_age_seconds if max_age_seconds > 0 else float("inf")
        self._cache: TTLCache = TTLCache(maxsize=max_entries, ttl=ttl, timer=clock)
        self._lock = threading.Lock()

    def load(self, session_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            data = self._cache.get(session_id)
        if data is None:
            return None
        return dict(data)

    def save(self, session_id: str, data: Dict[str, Any]) -> None:
        with self._lock:
            self._cache[session_id] = dict(data)

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._cache.pop(session_id, None)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._cache

    def __len__(self) -> int:
        with self._lock:
            self._cache.expire()
            return len(self._cache)


class NativeSession:
    """
    One request's view of the server-side session.

    - data is None until the session is started
    - start() fails once headers are sent or after destroy()
    - cookie changes are recorded, the middleware applies them
    """

    def __init__(
        self,
        name: str,
        backend: MemorySessionBackend,
        session_id: str | None = None,
        data: Dict[str, Any] | None = None,
        created_at: int | None = None,
    ):
        self.name = name
        self.backend = backend
        self.id = session_id
        self.data = data
        self.created_at = created_at if created_at is not None else int(time.time())
        self.headers_sent = False
        self.destroyed = False
        self.cookie_expired = False
        self.id_changed = False

    @property
    def started(self) -> bool:
        return self.data is not None

    def start(self) -> None:
        if self.started:
            return
        if self.headers_sent:
            raise SessionStartError("cannot start session: headers already sent")
        if self.destroyed:
            raise SessionStartError("cannot start session: session was destroyed")
        self.id = new_session_id()
        self.data = {}
        self.created_at = int(time.time())
        self.id_changed = True
        logger.debug("Started new native session %s", self.name)

    def regenerate_id(self, delete_old: bool = True) -> bool:
        if not self.started or self.headers_sent:
            return False
        old_id = self.id
        self.id = new_session_id()
        self.created_at = int(time.time())
        self.id_changed = True
        if delete_old and old_id:
            self.backend.delete(old_id)
        return True

    def expire_cookie(self) -> None:
        self.cookie_expired = True

    def destroy(self) -> bool:
        if not self.started:
            return False
        if self.id:
            self.backend.delete(self.id)
        self.id = None
        self.data = None
        self.destroyed = True
        return True

    def mark_headers_sent(self) -> None:
        self.headers_sent = True
