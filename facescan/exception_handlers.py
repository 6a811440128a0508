"""Exception handlers translating service errors into JSON responses.

Every error body has the shape ``{"message": ...}``. Auth, profile and API-key errors
carry their own status code and public payload; anything unexpected becomes
a sanitized 500.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from facescan.services.api_key_service import ApiKeyError
from facescan.services.auth_service import AuthError
from facescan.services.profile_service import ProfileError
from facescan.services.session_service import SessionInvalidOrExpired

logger = logging.getLogger(__name__)


def setup_exception_handlers(app: FastAPI, *, expose_errors: bool = False) -> None:
    """Register handlers; `expose_errors` adds exception text to 500 bodies outside production."""

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
        return JSONResponse(exc.payload(), status_code=exc.status_code)

    @app.exception_handler(ApiKeyError)
    async def api_key_error_handler(request: Request, exc: ApiKeyError) -> JSONResponse:
        return JSONResponse(exc.payload(), status_code=exc.status_code)

    @app.exception_handler(ProfileError)
    async def profile_error_handler(request: Request, exc: ProfileError) -> JSONResponse:
        return JSONResponse(exc.payload(), status_code=exc.status_code)

    @app.exception_handler(SessionInvalidOrExpired)
    async def session_error_handler(request: Request, exc: SessionInvalidOrExpired) -> JSONResponse:
        return JSONResponse({"message": exc.message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("Rejected request body on %s: %s", request.url.path, exc.errors())
        return JSONResponse({"message": "Invalid request"}, status_code=status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse({"message": exc.detail}, status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        body = {"message": "Internal server error"}
        if expose_errors:
            body["error"] = str(exc)
        return JSONResponse(body, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
