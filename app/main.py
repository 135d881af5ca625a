from __future__ import annotations

import logging

from fastapi import FastAPI

from Sessions.native_session import MemorySessionBackend
from Sessions.request_id import RequestIdMiddleware
from Sessions.session_config import SESSION_SETTINGS, SessionOptions, ensure_session_secret
from Sessions.session_middleware import NativeSessionMiddleware

from .app_context import PrincipalResolver, default_principal_resolver
from .error_handlers import register_error_handlers


logger = logging.getLogger(__name__)


def create_app(
    settings: dict | None = None,
    secret_key: str | None = None,
    backend: MemorySessionBackend | None = None,
    principal_resolver: PrincipalResolver | None = None,
) -> FastAPI:
    settings = {**SESSION_SETTINGS, **(settings or {})}
    secret_key = secret_key or ensure_session_secret()
    if backend is None:
        backend = MemorySessionBackend(max_age_seconds=settings["SESSION_MAX_AGE"])

    app = FastAPI()
    app.state.session_options = SessionOptions.from_settings(settings)
    app.state.principal_resolver = principal_resolver or default_principal_resolver
    app.state.session_backend = backend

    # Added first so RequestIdMiddleware wraps it and audit lines carry the request id.
    app.add_middleware(
        NativeSessionMiddleware,
        secret_key=secret_key,
        backend=backend,
        cookie_name=settings["SESSION_COOKIE_NAME"],
        max_age_seconds=settings["SESSION_MAX_AGE"],
        https_only=settings["SESSION_HTTPS_ONLY"],
        same_site=settings["SESSION_SAME_SITE"],
        path=settings["SESSION_COOKIE_PATH"],
    )
    app.add_middleware(RequestIdMiddleware)
    register_error_handlers(app)

    logger.info(
        "Session app ready: cookie=%s namespace=%s",
        settings["SESSION_COOKIE_NAME"],
        app.state.session_options.namespace,
    )
    return app
