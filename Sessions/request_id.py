"""
REQUEST ID
==========
Attach a unique request id and bind the audit context.
"""

# FLOW:
# - Middleware sets/echoes x-request-id for every request.
# - The audit context is bound for the duration of the request.

from __future__ import annotations

import uuid

from starlette.middleware.base import BaseHTTPMiddleware

from Sessions.audit_trail import clear_audit_request_context, set_audit_request_context


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        token = set_audit_request_context(request)
        try:
            response = await call_next(request)
        finally:
            clear_audit_request_context(token)
        response.headers["x-request-id"] = request_id
        return response
