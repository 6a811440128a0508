"""Application factory wiring settings, storage and services into FastAPI."""
from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI

from facescan.core.config import Settings, get_settings
from facescan.core.logging import configure_logging
from facescan.core.mailer import SMTPMailer
from facescan.core.security import CredentialHasher
from facescan.core.tokens import TokenIssuer
from facescan.db import models  # noqa: F401  # ensure models are imported for metadata
from facescan.db.session import Base, build_engine, build_sessionmaker
from facescan.exception_handlers import setup_exception_handlers
from facescan.repositories.sql_repository import SQLRepository
from facescan.routers import api_keys as api_keys_router
from facescan.routers import auth as auth_router
from facescan.routers import profiles as profiles_router
from facescan.services.api_key_service import ApiKeyService
from facescan.services.auth_service import AuthService
from facescan.services.notifier import EmailNotifier, Notifier
from facescan.services.profile_service import ProfileService
from facescan.services.session_service import SessionService

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, *, notifier: Optional[Notifier] = None) -> FastAPI:
    """Build the app. Tests pass explicit settings and a recording notifier."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    engine = build_engine(settings.database_url)
    repository = SQLRepository(build_sessionmaker(engine))
    sessions = SessionService(settings.jwt_secret, ttl_seconds=settings.session_ttl_seconds)
    if notifier is None:
        notifier = EmailNotifier(
            SMTPMailer(settings),
            settings.frontend_url,
            verification_ttl_seconds=settings.email_verification_ttl_seconds,
            reset_ttl_seconds=settings.password_reset_ttl,
        )
    auth_service = AuthService(
        repository,
        CredentialHasher(
            time_cost=settings.password_hash_time_cost,
            memory_cost=settings.password_hash_memory_cost,
        ),
        sessions,
        notifier,
        tokens=TokenIssuer(),
        verification_ttl_seconds=settings.email_verification_ttl_seconds,
        reset_ttl_seconds=settings.password_reset_ttl,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        Base.metadata.create_all(bind=engine)
        logger.info("facescan API started (env=%s)", settings.app_env)
        try:
            yield
        finally:
            engine.dispose()

    app = FastAPI(title="facescan API", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.repository = repository
    app.state.session_service = sessions
    app.state.auth_service = auth_service
    app.state.api_key_service = ApiKeyService(repository)
    app.state.profile_service = ProfileService(repository)

    setup_exception_handlers(app, expose_errors=not settings.is_production)
    app.include_router(auth_router.router)
    app.include_router(profiles_router.router)
    app.include_router(api_keys_router.router)

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {
            "status": "ok",
            "message": "Server is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


app = create_app()
