from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status

from facescan.routers.deps import current_session, get_api_key_service
from facescan.schemas.api_keys import CreateApiKeyPayload
from facescan.services.api_key_service import ApiKeyService, serialize_key
from facescan.services.session_service import SessionClaims

router = APIRouter(prefix="/apikeys", tags=["api-keys"])


@router.get("/listApiKeys")
def list_api_keys(
    session: SessionClaims = Depends(current_session),
    service: ApiKeyService = Depends(get_api_key_service),
):
    return {"apiKeys": [serialize_key(key) for key in service.list_keys(session.user_id)]}


@router.post("/createApiKey", status_code=status.HTTP_201_CREATED)
def create_api_key(
    payload: Optional[CreateApiKeyPayload] = None,
    session: SessionClaims = Depends(current_session),
    service: ApiKeyService = Depends(get_api_key_service),
):
    payload = payload or CreateApiKeyPayload()
    entity = service.create_key(session.user_id, payload.name, payload.permissions)
    return {"apiKey": serialize_key(entity)}


@router.delete("/{key_id}")
def delete_api_key(
    key_id: int,
    session: SessionClaims = Depends(current_session),
    service: ApiKeyService = Depends(get_api_key_service),
):
    service.delete_key(session.user_id, key_id)
    return {"message": "API key deleted successfully"}


@router.post("/{key_id}/regenerate")
def regenerate_api_key(
    key_id: int,
    session: SessionClaims = Depends(current_session),
    service: ApiKeyService = Depends(get_api_key_service),
):
    entity = service.regenerate_key(session.user_id, key_id)
    return {"apiKey": serialize_key(entity)}
