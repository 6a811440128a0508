"""Shared FastAPI dependencies (services from app state, bearer sessions)."""
from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from facescan.services.api_key_service import ApiKeyService
from facescan.services.auth_service import AuthService
from facescan.services.profile_service import ProfileService
from facescan.services.session_service import SessionClaims, SessionService

_bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_api_key_service(request: Request) -> ApiKeyService:
    return request.app.state.api_key_service


def get_profile_service(request: Request) -> ProfileService:
    return request.app.state.profile_service


def get_session_service(request: Request) -> SessionService:
    return request.app.state.session_service


def current_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    sessions: SessionService = Depends(get_session_service),
) -> SessionClaims:
    """Resolve the bearer token; SessionInvalidOrExpired is turned into a 403 by the app handlers."""
    token = (credentials.credentials or "").strip() if credentials else ""
    if not token or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Access token required")
    return sessions.verify(token)
