"""Security helpers (hashing and verification)."""

from __future__ import annotations

import bcrypt
from argon2 import PasswordHasher, exceptions as argon_exc

_PREFIX = "argon2$"
_LEGACY_PREFIXES = ("$2a$", "$2b$", "$2y$")


class CredentialHasher:
    """Argon2 password hashing with read support for legacy bcrypt hashes.

    Accounts created by the previous service carry bcrypt hashes (cost 12).
    They keep working and are upgraded to Argon2 on the next successful login
    through `needs_rehash`.
    """

    def __init__(self, *, time_cost: int = 3, memory_cost: int = 65536) -> None:
        self._ph = PasswordHasher(time_cost=time_cost, memory_cost=memory_cost)

    def hash(self, password: str) -> str:
        """Create a modern Argon2 hash with a prefix for detection."""
        return f"{_PREFIX}{self._ph.hash(password)}"

    def verify(self, password: str, stored_hash: str | None) -> bool:
        stored = stored_hash or ""
        if stored.startswith(_PREFIX):
            try:
                return self._ph.verify(stored[len(_PREFIX):], password)
            except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
                return False
        if stored.startswith(_LEGACY_PREFIXES):
            try:
                return bcrypt.checkpw(password.encode("utf-8"), stored.encode("utf-8"))
            except ValueError:
                return False
        return False

    def needs_rehash(self, stored_hash: str | None) -> bool:
        stored = stored_hash or ""
        if not stored.startswith(_PREFIX):
            return True
        try:
            return self._ph.check_needs_rehash(stored[len(_PREFIX):])
        except argon_exc.InvalidHashError:
            return True
