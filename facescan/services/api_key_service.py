"""Service for API key management."""

from __future__ import annotations

import logging
import secrets
import string

from facescan.db.models import ApiKey
from facescan.repositories.sql_repository import SQLRepository

logger = logging.getLogger(__name__)

KEY_PREFIX = "hv_live_sk_"
KEY_ALPHABET = string.ascii_lowercase + string.digits
KEY_LENGTH = 32
VALID_PERMISSIONS = ("read", "write", "delete")


class ApiKeyError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def payload(self) -> dict:
        return {"message": self.message}


class ApiKeyValidationError(ApiKeyError):
    pass


class ApiKeyNotFoundError(ApiKeyError):
    status_code = 404

    def __init__(self, message: str = "API key not found"):
        super().__init__(message)


def generate_key() -> str:
    return KEY_PREFIX + "".join(secrets.choice(KEY_ALPHABET) for _ in range(KEY_LENGTH))


def serialize_key(entity: ApiKey) -> dict:
    return {
        "id": entity.id,
        "name": entity.name,
        "key": entity.key,
        "permissions": list(entity.permissions or []),
        "status": entity.status,
        "created": entity.created_at.isoformat() if entity.created_at else None,
        "lastUsed": entity.last_used.isoformat() if entity.last_used else "Never",
        "requestsThisMonth": entity.requests_this_month or 0,
        "rateLimit": entity.rate_limit or "1000/hour",
    }


class ApiKeyService:
    """Lists, creates, deletes and rotates a user's API keys."""

    def __init__(self, repository: SQLRepository) -> None:
        self.repository = repository

    def list_keys(self, user_id: int) -> list[ApiKey]:
        return self.repository.list_api_keys(user_id)

    def create_key(self, user_id: int, name: str | None, permissions: list[str] | None) -> ApiKey:
        clean_name = (name or "").strip()
        if not clean_name:
            raise ApiKeyValidationError("API key name is required")
        if not permissions:
            raise ApiKeyValidationError("At least one permission is required")
        invalid = [p for p in permissions if p not in VALID_PERMISSIONS]
        if invalid:
            raise ApiKeyValidationError(f"Invalid permissions: {', '.join(invalid)}")
        entity = self.repository.create_api_key(user_id, clean_name, generate_key(), permissions)
        logger.info("API key %s created for user %s", entity.id, user_id)
        return entity

    def delete_key(self, user_id: int, key_id: int) -> None:
        if not self.repository.delete_api_key(user_id, key_id):
            raise ApiKeyNotFoundError()
        logger.info("API key %s deleted for user %s", key_id, user_id)

    def regenerate_key(self, user_id: int, key_id: int) -> ApiKey:
        entity = self.repository.regenerate_api_key(user_id, key_id, generate_key())
        if not entity:
            raise ApiKeyNotFoundError()
        logger.info("API key %s regenerated for user %s", key_id, user_id)
        return entity
