"""
SESSION MIDDLEWARE
==================
Encrypted session-id cookie backed by server-side storage.

FLOW:
- Middleware decrypts the cookie into a session id and loads its data.
- The NativeSession is published at request.scope["native_session"].
- On response, data is saved and the cookie is written or expired.

HOW:
- Encrypts {"sid", "iat"} with Fernet and sets HttpOnly/Secure flags.
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
import time
from typing import Any, Dict

from cryptography.fernet import Fernet, InvalidToken
from starlette.middleware.base import BaseHTTPMiddleware

from Sessions.native_session import MemorySessionBackend, NativeSession


logger = logging.getLogger(__name__)

NATIVE_SESSION_SCOPE_KEY = "native_session"


def _derive_fernet_key(secret: str) -> bytes:
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest)


def get_native_session(request) -> NativeSession | None:
    return request.scope.get(NATIVE_SESSION_SCOPE_KEY)


class NativeSessionMiddleware(BaseHTTPMiddleware):
    """
    Session id cookie middleware.

    - Encrypts the session id with Fernet (AES in CBC + HMAC)
    - Keeps session data server-side in a MemorySessionBackend
    - Expires sessions older than max_age_seconds
    """

    def __init__(
        self,
        app,
        secret_key: str,
        backend: MemorySessionBackend | None = None,
        cookie_name: str = "session",
        max_age_seconds: int = 60 * 60 * 8,
        https_only: bool = True,
        same_site: str = "lax",
        domain: str | None = None,
        path: str = "/",
    ):
        super().__init__(app)
        self.cookie_name = cookie_name
        self.max_age_seconds = max_age_seconds
        self.https_only = https_only
        self.same_site = same_site
        self.domain = domain
        self.path = path
        if backend is None:
            backend = MemorySessionBackend(max_age_seconds=max_age_seconds)
        self.backend = backend
        self.fernet = Fernet(_derive_fernet_key(secret_key))

    def _decode_cookie(self, cookie: str) -> Dict[str, Any] | None:
        try:
            payload = self.fernet.decrypt(cookie.encode("utf-8"))
            data = json.loads(payload.decode("utf-8"))
        except (InvalidToken, ValueError, TypeError):
            logger.debug("Discarding undecodable session cookie")
            return None
        if not isinstance(data, dict) or not data.get("sid"):
            return None
        return data

    def _encode_cookie(self, session_id: str, created: int) -> str:
        data = {"sid": session_id, "iat": created}
        return self.fernet.encrypt(json.dumps(data).encode("utf-8")).decode("utf-8")

    def _load(self, request, now: int) -> NativeSession:
        cookie = request.cookies.get(self.cookie_name)
        if cookie:
            payload = self._decode_cookie(cookie)
            if payload:
                try:
                    created = int(payload.get("iat", now))
                except (TypeError, ValueError):
                    created = now
                expired = bool(self.max_age_seconds) and now > created + self.max_age_seconds
                data = None if expired else self.backend.load(payload["sid"])
                if data is not None:
                    return NativeSession(
                        self.cookie_name,
                        self.backend,
                        session_id=payload["sid"],
                        data=data,
                        created_at=created,
                    )
                if expired:
                    self.backend.delete(payload["sid"])
        return NativeSession(self.cookie_name, self.backend)

    async def dispatch(self, request, call_next):
        now = int(time.time())
        native = self._load(request, now)
        request.scope[NATIVE_SESSION_SCOPE_KEY] = native

        response = await call_next(request)
        native.mark_headers_sent()

        if native.cookie_expired or native.destroyed:
            response.delete_cookie(self.cookie_name, path=self.path, domain=self.domain)
            return response
        if not native.started:
            return response

        self.backend.save(native.id, native.data)
        response.set_cookie(
            self.cookie_name,
            self._encode_cookie(native.id, native.created_at),
            max_age=self.max_age_seconds,
            httponly=True,
            secure=self.https_only,
            samesite=self.same_site,
            domain=self.domain,
            path=self.path,
        )
        return response
