"""
Configuration helpers for the facescan backend.

Everything the app needs from the environment (database URL, JWT secret,
TTLs, hashing work factors, SMTP) is read here once and handed to the
components built in `facescan.app.create_app`.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str = "dev"
    database_url: str = "sqlite:///./facescan.db"
    jwt_secret: str = "fallback_secret_key"
    session_ttl_seconds: int = 86400
    email_verification_ttl_seconds: int = 86400
    password_reset_ttl: int = 3600
    password_hash_time_cost: int = 3
    password_hash_memory_cost: int = 65536
    frontend_url: str = "http://localhost:3000"
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_from: str = ""
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.app_env == "prod"


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str | None, default: int) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./facescan.db"),
        jwt_secret=os.getenv("JWT_SECRET", "fallback_secret_key"),
        session_ttl_seconds=_int(os.getenv("SESSION_TTL_SECONDS"), 86400),
        email_verification_ttl_seconds=_int(os.getenv("EMAIL_VERIFICATION_TTL_SECONDS"), 86400),
        password_reset_ttl=_int(os.getenv("PASSWORD_RESET_TTL"), 3600),
        password_hash_time_cost=_int(os.getenv("PASSWORD_HASH_TIME_COST"), 3),
        password_hash_memory_cost=_int(os.getenv("PASSWORD_HASH_MEMORY_COST"), 65536),
        frontend_url=os.getenv("FRONTEND_URL", "http://localhost:3000").rstrip("/"),
        smtp_host=os.getenv("SMTP_HOST", ""),
        smtp_port=_int(os.getenv("SMTP_PORT"), 587),
        smtp_user=os.getenv("SMTP_USER", ""),
        smtp_password=os.getenv("SMTP_PASSWORD", ""),
        smtp_from=os.getenv("SMTP_FROM", os.getenv("SMTP_USER", "")),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
