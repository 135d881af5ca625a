"""
SESSION STORE
=============
Namespaced key/value access with per-entry expiry over the native session.

FLOW:
- One Session is built per request; construction runs the fixation guard.
- get/set/exists/delete/expired translate the key, then touch native storage.
- regenerate()/destroy() control the native session lifecycle.

HOW:
- Entries are stored as {"value": v} or {"value": v, "expire": ts}.
- Expiry is checked lazily; only get() removes an expired entry.
- Without a valid session every operation is a no-op or returns its default.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

from Sessions.audit_trail import audit
from Sessions.errors import SessionStartError
from Sessions.fixation_guard import ANONYMOUS_PRINCIPAL, bind_principal, normalize_principal
from Sessions.native_session import NativeSession
from Sessions.session_config import SessionOptions
from Sessions.session_models import SessionEntry, SessionState


logger = logging.getLogger(__name__)


def _unix_now() -> int:
    return int(time.time())


class Session:
    """Per-request session handler."""

    def __init__(
        self,
        native: NativeSession | None,
        principal_id: Any = ANONYMOUS_PRINCIPAL,
        options: SessionOptions | None = None,
        clock: Callable[[], int] = _unix_now,
    ):
        self.native = native
        self.principal_id = normalize_principal(principal_id)
        self.options = options or SessionOptions()
        self.clock = clock
        self.state = SessionState()
        self.initialize()

    def initialize(self) -> None:
        if self.state.initialized:
            return
        self.state.initialized = True
        self._check_session()

    @property
    def is_valid(self) -> bool:
        return self.state.valid_session

    def get_session_key(self, key: str) -> str:
        return f"{self.options.namespace}-{key}"

    def _check_session(self) -> None:
        native = self.native
        if native is None:
            logger.debug("No native session available; session support disabled for this request")
            return
        if not native.started and not native.headers_sent:
            try:
                native.start()
            except SessionStartError as exc:
                logger.warning("Session could not be started: %s", exc)
                audit("session_start_failed", user_id=self.principal_id, details=str(exc))
        if native.started:
            self.state.valid_session = True
        bind_principal(self, self.options.user_check_key_name, self.principal_id)

    @property
    def _storage(self) -> dict:
        return self.native.data

    def regenerate(self) -> None:
        if not self.state.valid_session or self.state.regenerated:
            return
        self.state.regenerated = True
        if self.native.regenerate_id(delete_old=True):
            audit("session_regenerated", user_id=self.principal_id)

    def destroy(self) -> None:
        if not self.state.valid_session:
            return
        self._storage.clear()
        self.native.expire_cookie()
        self.native.destroy()
        self.state.valid_session = False
        audit("session_destroyed", user_id=self.principal_id)

    def _now(self) -> int:
        return int(self.clock())

    def expired(self, key: str) -> bool:
        if not self.state.valid_session:
            return False
        key = self.get_session_key(key)
        if key not in self._storage:
            return False
        entry = SessionEntry.from_storage(self._storage[key])
        if entry is None:
            return False
        return entry.is_expired(self._now())

    def get(self, key: str, default: Any = None) -> Any:
        if not self.state.valid_session:
            return default
        key = self.get_session_key(key)
        if key not in self._storage:
            return default
        entry = SessionEntry.from_storage(self._storage[key])
        if entry is None:
            return default
        if entry.is_expired(self._now()):
            del self._storage[key]
            return default
        return entry.value

    def set(self, key: str, value: Any, duration: Optional[int] = None) -> None:
        if not self.state.valid_session:
            return
        expire_at = None
        if duration is not None and duration > 0:
            expire_at = self._now() + int(duration)
        self._storage[self.get_session_key(key)] = SessionEntry(value, expire_at).to_storage()

    def exists(self, key: str) -> bool:
        if not self.state.valid_session:
            return False
        key = self.get_session_key(key)
        if key not in self._storage:
            return False
        entry = SessionEntry.from_storage(self._storage[key])
        if entry is None:
            return False
        return not entry.is_expired(self._now())

    def delete(self, key: str) -> None:
        if not self.state.valid_session:
            return
        key = self.get_session_key(key)
        if key in self._storage:
            del self._storage[key]
