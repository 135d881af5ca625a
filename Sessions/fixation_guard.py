"""
SESSION FIXATION GUARD
======================
Binds the session to the current principal.
"""

# FLOW:
# - bind_principal() runs once when the session handler is built.
# - A stored principal that differs from the current one triggers regenerate().
# HOW:
# - Principals are compared as strings; None and "" mean anonymous (0).

from __future__ import annotations

import logging
from typing import Any

from Sessions.audit_trail import audit


logger = logging.getLogger(__name__)

ANONYMOUS_PRINCIPAL = 0


def normalize_principal(principal_id: Any) -> Any:
    if principal_id is None or principal_id == "":
        return ANONYMOUS_PRINCIPAL
    return principal_id


def bind_principal(store, check_key: str, principal_id: Any) -> bool:
    """Record or validate the principal; returns True when a different principal was found."""
    principal_id = normalize_principal(principal_id)
    check = store.get(check_key)
    if check is None:
        store.set(check_key, principal_id)
        return False
    if str(check) == str(principal_id):
        return False

    logger.info("Session principal changed; regenerating session id")
    audit("session_fixation_detected", user_id=principal_id, details=f"previous_user_id={check}")
    store.regenerate()
    store.set(check_key, principal_id)
    return True
