"""
FEATURE: SCOPED SESSIONS
"""

# FLOW:
# - Re-export the session handler, middleware and options.
# HOW:
# - Single import point for request handlers.

from Sessions.errors import SessionConfigError, SessionError, SessionStartError
from Sessions.fixation_guard import ANONYMOUS_PRINCIPAL
from Sessions.native_session import MemorySessionBackend, NativeSession
from Sessions.session_config import SessionOptions
from Sessions.session_middleware import NativeSessionMiddleware, get_native_session
from Sessions.session_store import Session

__all__ = [
    "ANONYMOUS_PRINCIPAL",
    "MemorySessionBackend",
    "NativeSession",
    "NativeSessionMiddleware",
    "Session",
    "SessionConfigError",
    "SessionError",
    "SessionOptions",
    "SessionStartError",
    "get_native_session",
]
