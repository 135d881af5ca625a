"""
SESSION ERRORS
==============
Exceptions raised by the session layer.
"""

# FLOW:
# - SessionConfigError is raised at construction for unusable options.
# - SessionStartError is raised by the native session and caught by the handler.

from __future__ import annotations


class SessionError(Exception):
    """Base class for session errors."""


class SessionConfigError(SessionError, ValueError):
    """Invalid session naming options."""


class SessionStartError(SessionError):
    """The native session could not be started."""
