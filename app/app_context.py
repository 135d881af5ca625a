from __future__ import annotations

from typing import Any, Callable

from fastapi import Request

from Sessions.feature_sessions import ANONYMOUS_PRINCIPAL, Session, SessionOptions, get_native_session


PrincipalResolver = Callable[[Request], Any]


def default_principal_resolver(request: Request) -> Any:
    """Read the id an authentication layer left on request.state."""
    return getattr(request.state, "user_id", ANONYMOUS_PRINCIPAL)


def build_request_session(
    request: Request,
    options: SessionOptions | None = None,
    principal_resolver: PrincipalResolver | None = None,
) -> Session:
    """Build the request's Session once and reuse it for later lookups."""
    existing = getattr(request.state, "session_handler", None)
    if existing is not None:
        return existing
    if options is None:
        options = getattr(request.app.state, "session_options", None)
    if principal_resolver is None:
        principal_resolver = getattr(request.app.state, "principal_resolver", default_principal_resolver)
    handler = Session(
        get_native_session(request),
        principal_id=principal_resolver(request),
        options=options,
    )
    request.state.session_handler = handler
    return handler


def get_session(request: Request) -> Session:
    return build_request_session(request)
