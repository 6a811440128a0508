from __future__ import annotations

from datetime import datetime, timedelta, timezone
import sys
from pathlib import Path

import pytest

# Keep the package importable when running the suite from a plain checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from facescan.core.security import CredentialHasher  # noqa: E402
from facescan.db import models  # noqa: E402,F401
from facescan.db.session import Base, build_engine, build_sessionmaker  # noqa: E402
from facescan.repositories.sql_repository import SQLRepository  # noqa: E402
from facescan.services.auth_service import AuthService  # noqa: E402
from facescan.services.profile_service import ProfileService  # noqa: E402
from facescan.services.session_service import SessionService  # noqa: E402

STRONG_PASSWORD = "Str0ng!Pass"
TEST_SECRET = "test-secret"


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingNotifier:
    """Collects outgoing account emails instead of sending them."""

    def __init__(self) -> None:
        self.verifications: list[tuple[str, str]] = []
        self.resets: list[tuple[str, str]] = []

    def send_verification(self, email: str, token: str) -> bool:
        self.verifications.append((email, token))
        return True

    def send_password_reset(self, email: str, token: str) -> bool:
        self.resets.append((email, token))
        return True

    @property
    def last_verification_token(self) -> str:
        return self.verifications[-1][1]

    @property
    def last_reset_token(self) -> str:
        return self.resets[-1][1]


@pytest.fixture()
def session_factory(tmp_path):
    """Temporary SQLite database with the full schema."""
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    yield build_sessionmaker(engine)
    engine.dispose()


@pytest.fixture()
def repository(session_factory) -> SQLRepository:
    return SQLRepository(session_factory)


@pytest.fixture()
def hasher() -> CredentialHasher:
    # Low work factors keep the suite fast.
    return CredentialHasher(time_cost=1, memory_cost=8192)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def sessions() -> SessionService:
    return SessionService(TEST_SECRET)


@pytest.fixture()
def auth_service(repository, hasher, sessions, notifier, clock) -> AuthService:
    return AuthService(repository, hasher, sessions, notifier, clock=clock)


@pytest.fixture()
def profile_service(repository, clock) -> ProfileService:
    return ProfileService(repository, clock=clock)
