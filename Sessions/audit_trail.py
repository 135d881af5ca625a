"""
SESSION AUDIT TRAIL
===================
Structured audit logging for session lifecycle events.
"""

# FLOW:
# - Call audit() on fixation detection, regeneration and destroy.
# - RequestIdMiddleware binds the request context for each request.
# HOW:
# - Emits key=value lines to <SESSION_LOG_DIR>/audit.log.

from __future__ import annotations

import contextvars
import logging
import os
from logging.handlers import RotatingFileHandler

from Sessions.metrics import increment_session_event
from Sessions.session_config import SESSION_SETTINGS


def _get_logger() -> logging.Logger:
    logger = logging.getLogger("session.audit")
    if logger.handlers:
        return logger

    log_dir = SESSION_SETTINGS["SESSION_LOG_DIR"]
    os.makedirs(log_dir, exist_ok=True)
    handler = RotatingFileHandler(os.path.join(log_dir, "audit.log"), maxBytes=2_000_000, backupCount=3)
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(message)s")
    handler.setFormatter(formatter)
    logger.setLevel(logging.INFO)
    logger.addHandler(handler)
    return logger


logger = _get_logger()

_audit_ctx: contextvars.ContextVar[dict[str, str] | None] = contextvars.ContextVar("session_audit_ctx", default=None)


def _client_ip(request) -> str:
    if request.client and request.client.host:
        return request.client.host
    return "-"


def set_audit_request_context(request):
    request_id = getattr(request.state, "request_id", "")
    payload = {
        "ip": _client_ip(request),
        "request_id": str(request_id or "").strip(),
        "path": str(request.url.path or "").strip(),
        "method": str(request.method or "").strip(),
    }
    return _audit_ctx.set(payload)


def clear_audit_request_context(token) -> None:
    _audit_ctx.reset(token)


def audit(event: str, user_id=None, details: str | None = None) -> None:
    ctx = _audit_ctx.get() or {}
    logger.info(
        "event=%s user_id=%s ip=%s request_id=%s method=%s path=%s details=%s",
        event,
        user_id,
        ctx.get("ip", "-"),
        ctx.get("request_id", ""),
        ctx.get("method", ""),
        ctx.get("path", ""),
        details or "",
    )
    increment_session_event(event)
