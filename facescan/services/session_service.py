"""Bearer session tokens (issue and validate signed JWTs)."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

import jwt

from facescan.core.tokens import Clock, utcnow

ALGORITHM = "HS256"
INVALID_SESSION_MESSAGE = "Invalid or expired token"


class SessionInvalidOrExpired(Exception):
    """Raised for any token that cannot be trusted: expired, tampered or malformed."""

    status_code = 403
    message = INVALID_SESSION_MESSAGE


@dataclass(frozen=True)
class SessionClaims:
    user_id: int
    email: str
    username: str


class SessionService:
    """Stateless sessions: verification needs only the shared secret, no store lookup."""

    def __init__(self, secret: str, *, ttl_seconds: int = 86400, clock: Clock = utcnow) -> None:
        if not secret:
            raise ValueError("A JWT secret is required to issue sessions.")
        self._secret = secret
        self._ttl = timedelta(seconds=max(60, ttl_seconds))
        self._clock = clock

    def issue(self, claims: SessionClaims) -> str:
        now = self._clock()
        payload = {
            "userId": claims.user_id,
            "email": claims.email,
            "userName": claims.username,
            "iat": now,
            "exp": now + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> SessionClaims:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "iat"]},
            )
            return SessionClaims(
                user_id=int(payload["userId"]),
                email=str(payload["email"]),
                username=str(payload["userName"]),
            )
        except (jwt.InvalidTokenError, KeyError, TypeError, ValueError) as exc:
            raise SessionInvalidOrExpired(INVALID_SESSION_MESSAGE) from exc
