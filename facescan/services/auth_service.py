"""
Account credential lifecycle: registration, email verification, login,
password reset and resend-verification.

Each operation is a read-decide-write sequence over the repository. Failures
are raised as `AuthError` subclasses carrying the HTTP status and the public
message; the router layer only translates them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
import logging

from facescan.core.security import CredentialHasher
from facescan.core.tokens import Clock, TokenIssuer, utcnow
from facescan.domain.passwords import evaluate_password, is_valid_email
from facescan.repositories.sql_repository import DuplicateUserError, SQLRepository
from facescan.services.notifier import Notifier
from facescan.services.session_service import SessionClaims, SessionService

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Base class for authentication-related exceptions."""

    status_code = 400
    message = "Bad request"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def payload(self) -> dict:
        return {"message": self.message}


class MissingFieldError(AuthError):
    def __init__(self, message: str, received: dict[str, bool] | None = None):
        super().__init__(message)
        self.received = received

    def payload(self) -> dict:
        body = super().payload()
        if self.received is not None:
            body["received"] = self.received
        return body


class InvalidEmailFormatError(AuthError):
    message = "Invalid email format"


class WeakPasswordError(AuthError):
    message = "Password does not meet requirements"

    def __init__(self, requirements: dict[str, bool]):
        super().__init__()
        self.requirements = requirements

    def payload(self) -> dict:
        return {"message": self.message, "requirements": self.requirements}


class AccountExistsError(AuthError):
    status_code = 409
    message = "User already exists and is verified"


class InvalidCredentialsError(AuthError):
    status_code = 401
    message = "Invalid credentials"


class EmailNotVerifiedError(AuthError):
    status_code = 401
    message = "Please verify your email first. Check your inbox for the verification link."


class TokenInvalidError(AuthError):
    message = "Invalid or expired token"


class UserNotFoundError(AuthError):
    status_code = 404
    message = "User not found"


class AlreadyVerifiedError(AuthError):
    message = "User is already verified"


class RegisterStatus(str, Enum):
    REGISTERED = "registered"
    VERIFICATION_RESENT = "verification_resent"


@dataclass
class RegisterOutcome:
    status: RegisterStatus
    email: str


@dataclass(frozen=True)
class PublicUser:
    id: int
    email: str
    username: str

    def as_dict(self) -> dict:
        return {"id": self.id, "email": self.email, "userName": self.username}


@dataclass
class LoginResult:
    token: str
    user: PublicUser


@dataclass
class ResetRequestedAck:
    message: str = "If an account exists, we have sent a password reset link"


def _normalize_email(value: str | None) -> str:
    return (value or "").strip().lower()


class AuthService:
    """Handles registration, login, verification and password reset flows."""

    def __init__(
        self,
        repository: SQLRepository,
        hasher: CredentialHasher,
        sessions: SessionService,
        notifier: Notifier,
        *,
        tokens: TokenIssuer | None = None,
        verification_ttl_seconds: int = 86400,
        reset_ttl_seconds: int = 3600,
        clock: Clock = utcnow,
    ) -> None:
        self.repository = repository
        self.hasher = hasher
        self.sessions = sessions
        self.notifier = notifier
        self.clock = clock
        self.tokens = tokens or TokenIssuer(clock)
        self.verification_ttl = timedelta(seconds=verification_ttl_seconds)
        self.reset_ttl = timedelta(seconds=reset_ttl_seconds)

    # -------------------------------------- helpers --------------------------------------
    def _check_password(self, password: str) -> None:
        result = evaluate_password(password)
        if not result.acceptable:
            raise WeakPasswordError(result.checks)

    def _reissue_verification(self, user_id: int, email: str) -> None:
        issued = self.tokens.issue(self.verification_ttl)
        self.repository.set_verification_token(user_id, issued.token, issued.expires_at)
        self.notifier.send_verification(email, issued.token)

    # -------------------------------------- registration --------------------------------------
    def register(self, email: str | None, username: str | None, password: str | None) -> RegisterOutcome:
        raw_email = _normalize_email(email)
        raw_username = (username or "").strip()
        raw_password = password or ""
        if not (raw_email and raw_username and raw_password):
            raise MissingFieldError(
                "Email, username and password are required",
                received={
                    "hasEmail": bool(raw_email),
                    "hasUserName": bool(raw_username),
                    "hasPassword": bool(raw_password),
                },
            )
        if not is_valid_email(raw_email):
            raise InvalidEmailFormatError()
        self._check_password(raw_password)

        existing = self.repository.find_by_email_or_username(raw_email, raw_username)
        if existing:
            if existing.is_verified:
                raise AccountExistsError()
            # Abandoned signup: the token goes to the address already on file.
            self._reissue_verification(existing.id, existing.email)
            logger.info("Verification re-issued for unverified user %s", existing.id)
            return RegisterOutcome(status=RegisterStatus.VERIFICATION_RESENT, email=existing.email)

        password_hash = self.hasher.hash(raw_password)
        issued = self.tokens.issue(self.verification_ttl)
        try:
            user = self.repository.create_user(
                email=raw_email,
                username=raw_username,
                password_hash=password_hash,
                verification_token=issued.token,
                verification_token_expires_at=issued.expires_at,
            )
        except DuplicateUserError as exc:
            raise AccountExistsError() from exc
        self.notifier.send_verification(user.email, issued.token)
        logger.info("Registered user %s", user.id)
        return RegisterOutcome(status=RegisterStatus.REGISTERED, email=user.email)

    # -------------------------------------- verification --------------------------------------
    def verify_email(self, token: str | None) -> PublicUser:
        token_value = (token or "").strip()
        if not token_value:
            raise MissingFieldError("Verification token is required")
        user = self.repository.find_by_verification_token(token_value, self.clock())
        if not user:
            raise TokenInvalidError("Invalid or expired verification token")
        self.repository.mark_verified(user.id)
        logger.info("Email verified for user %s", user.id)
        return PublicUser(id=user.id, email=user.email, username=user.username)

    def resend_verification(self, email: str | None) -> str:
        raw_email = _normalize_email(email)
        if not raw_email:
            raise MissingFieldError("Email is required")
        user = self.repository.get_user_by_email(raw_email)
        if not user:
            raise UserNotFoundError()
        if user.is_verified:
            raise AlreadyVerifiedError()
        self._reissue_verification(user.id, user.email)
        logger.info("Verification resent for user %s", user.id)
        return user.email

    # -------------------------------------- login --------------------------------------
    def login(self, identifier: str | None, password: str | None) -> LoginResult:
        login_value = (identifier or "").strip()
        raw_password = password or ""
        if not login_value or not raw_password:
            raise MissingFieldError("Username and password are required")
        user = self.repository.find_by_login(login_value)
        if not user:
            logger.info("Login rejected: unknown account")
            raise InvalidCredentialsError()
        if not user.is_verified:
            logger.info("Login rejected: user %s not verified", user.id)
            raise EmailNotVerifiedError()
        if not self.hasher.verify(raw_password, user.password_hash):
            logger.info("Login rejected: bad password for user %s", user.id)
            raise InvalidCredentialsError()
        if self.hasher.needs_rehash(user.password_hash):
            self.repository.update_password_hash(user.id, self.hasher.hash(raw_password))
            logger.info("Upgraded password hash for user %s", user.id)

        public = PublicUser(id=user.id, email=user.email, username=user.username)
        token = self.sessions.issue(SessionClaims(user_id=user.id, email=user.email, username=user.username))
        logger.info("Login successful for user %s", user.id)
        return LoginResult(token=token, user=public)

    # -------------------------------------- password reset --------------------------------------
    def forgot_password(self, email: str | None) -> ResetRequestedAck:
        raw_email = _normalize_email(email)
        if not raw_email:
            raise MissingFieldError("Email is required")
        user = self.repository.get_user_by_email(raw_email)
        if user:
            issued = self.tokens.issue(self.reset_ttl)
            self.repository.set_reset_token(user.id, issued.token, issued.expires_at)
            self.notifier.send_password_reset(user.email, issued.token)
            logger.info("Password reset requested for user %s", user.id)
        return ResetRequestedAck()

    def reset_password(self, token: str | None, password: str | None) -> None:
        token_value = (token or "").strip()
        raw_password = password or ""
        if not token_value or not raw_password:
            raise MissingFieldError("Token and password are required")
        self._check_password(raw_password)
        user = self.repository.find_by_reset_token(token_value, self.clock())
        if not user:
            raise TokenInvalidError("Invalid or expired reset token")
        self.repository.replace_password(user.id, self.hasher.hash(raw_password))
        logger.info("Password reset completed for user %s", user.id)
