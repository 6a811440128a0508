from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from facescan.routers.deps import current_session, get_profile_service
from facescan.schemas.profiles import ProfilePayload
from facescan.services.profile_service import ProfileService, serialize_owner, serialize_profile
from facescan.services.session_service import SessionClaims

router = APIRouter(prefix="/profile", tags=["profile"])


@router.post("/createOrUpdateProfile")
def create_or_update_profile(
    payload: Optional[ProfilePayload] = None,
    session: SessionClaims = Depends(current_session),
    service: ProfileService = Depends(get_profile_service),
):
    fields = (payload or ProfilePayload()).model_dump()
    profile, created = service.save_profile(session.user_id, **fields)
    return {
        "success": True,
        "message": "Profile created successfully" if created else "Profile updated successfully",
        "profile": serialize_profile(profile),
        "userId": profile.user_id,
    }


@router.get("/getProfile")
def get_profile(
    session: SessionClaims = Depends(current_session),
    service: ProfileService = Depends(get_profile_service),
):
    user, profile = service.get_profile(session.user_id)
    return {
        "success": True,
        "user": serialize_owner(user),
        "profile": serialize_profile(profile) if profile else None,
    }
