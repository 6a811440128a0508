"""Opaque single-use tokens for email verification and password reset."""
from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

TOKEN_BYTES = 32

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


class TokenIssuer:
    """Generates 64-char hex tokens (256 bits) and their expiry instant."""

    def __init__(self, clock: Clock = utcnow) -> None:
        self._clock = clock

    def issue(self, ttl: timedelta) -> IssuedToken:
        return IssuedToken(token=secrets.token_hex(TOKEN_BYTES), expires_at=self._clock() + ttl)
