"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update, delete, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from facescan.db.models import ApiKey, Profile, User


class DuplicateUserError(Exception):
    """Raised when an insert collides with an existing email or username."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SQLRepository:
    """CRUD helpers wrapping the SQLAlchemy session.

    Each call opens its own short-lived session. Uniqueness of email and
    username is left to the database constraints.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def _session(self) -> Session:
        return self._session_factory()

    # -------------------------- users --------------------------
    def get_user(self, user_id: int) -> Optional[User]:
        with self._session() as session:
            return session.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._session() as session:
            stmt = select(User).where(User.email == email)
            return session.execute(stmt).scalar_one_or_none()

    def find_by_email_or_username(self, email: str, username: str) -> Optional[User]:
        """Email and username may match two different accounts; a verified one wins."""
        with self._session() as session:
            stmt = (
                select(User)
                .where(or_(User.email == email, User.username == username))
                .order_by(User.is_verified.desc(), User.id)
                .limit(1)
            )
            return session.execute(stmt).scalars().first()

    def find_by_login(self, identifier: str) -> Optional[User]:
        """Match a login identifier against username, or against the lower-cased email."""
        with self._session() as session:
            stmt = (
                select(User)
                .where(or_(User.username == identifier, User.email == identifier.lower()))
                .limit(1)
            )
            return session.execute(stmt).scalars().first()

    def find_by_verification_token(self, token: str, now: datetime) -> Optional[User]:
        with self._session() as session:
            stmt = select(User).where(
                User.verification_token == token,
                User.verification_token_expires_at > now,
            )
            return session.execute(stmt).scalar_one_or_none()

    def find_by_reset_token(self, token: str, now: datetime) -> Optional[User]:
        with self._session() as session:
            stmt = select(User).where(
                User.reset_token == token,
                User.reset_token_expires_at > now,
            )
            return session.execute(stmt).scalar_one_or_none()

    def create_user(
        self,
        email: str,
        username: str,
        password_hash: str,
        verification_token: str,
        verification_token_expires_at: datetime,
    ) -> User:
        now = _now()
        user = User(
            email=email,
            username=username,
            password_hash=password_hash,
            is_verified=False,
            verification_token=verification_token,
            verification_token_expires_at=verification_token_expires_at,
            created_at=now,
            updated_at=now,
        )
        with self._session() as session:
            session.add(user)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateUserError(email) from exc
            session.refresh(user)
            return user

    def _update_user(self, user_id: int, **values) -> None:
        values["updated_at"] = _now()
        with self._session() as session:
            session.execute(update(User).where(User.id == user_id).values(**values))
            session.commit()

    def set_verification_token(self, user_id: int, token: str, expires_at: datetime) -> None:
        self._update_user(user_id, verification_token=token, verification_token_expires_at=expires_at)

    def mark_verified(self, user_id: int) -> None:
        self._update_user(
            user_id,
            is_verified=True,
            verification_token=None,
            verification_token_expires_at=None,
        )

    def set_reset_token(self, user_id: int, token: str, expires_at: datetime) -> None:
        self._update_user(user_id, reset_token=token, reset_token_expires_at=expires_at)

    def replace_password(self, user_id: int, password_hash: str) -> None:
        """Store a new credential and consume the reset token in the same write."""
        self._update_user(
            user_id,
            password_hash=password_hash,
            reset_token=None,
            reset_token_expires_at=None,
        )

    def update_password_hash(self, user_id: int, password_hash: str) -> None:
        self._update_user(user_id, password_hash=password_hash)

    # -------------------------- profiles --------------------------
    def get_profile(self, user_id: int) -> Optional[Profile]:
        with self._session() as session:
            stmt = select(Profile).where(Profile.user_id == user_id)
            return session.execute(stmt).scalar_one_or_none()

    def upsert_profile(self, user_id: int, values: dict) -> tuple[Profile, bool]:
        """Create or overwrite the user's single profile. Returns (profile, created)."""
        now = _now()
        with self._session() as session:
            profile = session.execute(select(Profile).where(Profile.user_id == user_id)).scalar_one_or_none()
            created = profile is None
            if created:
                profile = Profile(user_id=user_id, created_at=now, updated_at=now, **values)
                session.add(profile)
            else:
                for name, value in values.items():
                    setattr(profile, name, value)
                profile.updated_at = now
            session.commit()
            session.refresh(profile)
            return profile, created

    # -------------------------- api keys --------------------------
    def list_api_keys(self, user_id: int) -> list[ApiKey]:
        with self._session() as session:
            stmt = select(ApiKey).where(ApiKey.user_id == user_id).order_by(ApiKey.id)
            return list(session.execute(stmt).scalars().all())

    def create_api_key(self, user_id: int, name: str, key: str, permissions: list[str]) -> ApiKey:
        now = _now()
        entity = ApiKey(
            user_id=user_id,
            name=name,
            key=key,
            permissions=list(permissions),
            status="active",
            requests_this_month=0,
            rate_limit="1000/hour",
            created_at=now,
            updated_at=now,
        )
        with self._session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def delete_api_key(self, user_id: int, key_id: int) -> bool:
        with self._session() as session:
            result = session.execute(delete(ApiKey).where(ApiKey.id == key_id, ApiKey.user_id == user_id))
            session.commit()
            return result.rowcount > 0

    def regenerate_api_key(self, user_id: int, key_id: int, new_key: str) -> Optional[ApiKey]:
        with self._session() as session:
            entity = session.execute(
                select(ApiKey).where(ApiKey.id == key_id, ApiKey.user_id == user_id)
            ).scalar_one_or_none()
            if not entity:
                return None
            entity.key = new_key
            entity.last_used = None
            entity.updated_at = _now()
            session.commit()
            session.refresh(entity)
            return entity
