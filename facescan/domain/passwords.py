"""Domain helpers for password strength and email format validation."""
from __future__ import annotations

import re
from dataclasses import dataclass, field

MIN_LENGTH = 10
MAX_LENGTH = 64
SYMBOLS = "!@#$%^&*+-_=;:<>?|~"

UPPERCASE_PATTERN = re.compile(r"[A-Z]")
LOWERCASE_PATTERN = re.compile(r"[a-z]")
DIGIT_PATTERN = re.compile(r"\d")
SYMBOL_PATTERN = re.compile(f"[{re.escape(SYMBOLS)}]")
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


@dataclass(frozen=True)
class PasswordCheck:
    acceptable: bool
    checks: dict[str, bool] = field(default_factory=dict)


def evaluate_password(password: str | None) -> PasswordCheck:
    """Run every strength rule and report each outcome, camelCase keyed for the API."""
    value = password or ""
    checks = {
        "minLength": len(value) >= MIN_LENGTH,
        "maxLength": len(value) <= MAX_LENGTH,
        "hasUppercase": bool(UPPERCASE_PATTERN.search(value)),
        "hasLowercase": bool(LOWERCASE_PATTERN.search(value)),
        "hasDigit": bool(DIGIT_PATTERN.search(value)),
        "hasSymbol": bool(SYMBOL_PATTERN.search(value)),
    }
    return PasswordCheck(acceptable=all(checks.values()), checks=checks)


def is_valid_email(value: str | None) -> bool:
    if not value:
        return False
    return bool(EMAIL_PATTERN.fullmatch(value))
