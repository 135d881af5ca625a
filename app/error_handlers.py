from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from Sessions.errors import SessionConfigError


logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        if exc.status_code >= 500:
            return JSONResponse({"detail": "An error occurred"}, status_code=exc.status_code)
        return JSONResponse({"detail": "Request failed"}, status_code=exc.status_code)

    @app.exception_handler(SessionConfigError)
    async def session_config_handler(request: Request, exc: SessionConfigError):
        logger.error("Invalid session configuration: %s", exc)
        return JSONResponse({"detail": "An error occurred"}, status_code=500)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse({"detail": "An error occurred"}, status_code=500)
