from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from facescan.routers.deps import get_auth_service
from facescan.schemas.auth import EmailPayload, LoginPayload, RegisterPayload, ResetPasswordPayload
from facescan.services.auth_service import AuthService, RegisterStatus

router = APIRouter(prefix="/auth", tags=["auth"])

REGISTERED_MESSAGE = "User registered successfully. Please check your email to verify your account."
RESENT_MESSAGE = "Verification email resent. Please check your email."


@router.post("/register")
def register(payload: Optional[RegisterPayload] = None, service: AuthService = Depends(get_auth_service)):
    payload = payload or RegisterPayload()
    outcome = service.register(payload.email, payload.user_name, payload.password)
    if outcome.status is RegisterStatus.VERIFICATION_RESENT:
        return JSONResponse({"message": RESENT_MESSAGE}, status_code=status.HTTP_200_OK)
    return JSONResponse({"message": REGISTERED_MESSAGE}, status_code=status.HTTP_201_CREATED)


@router.get("/verify-email")
def verify_email(token: str = "", service: AuthService = Depends(get_auth_service)):
    service.verify_email(token)
    return {"message": "Email verified successfully"}


@router.post("/login")
def login(payload: Optional[LoginPayload] = None, service: AuthService = Depends(get_auth_service)):
    payload = payload or LoginPayload()
    result = service.login(payload.login_user_name, payload.login_password)
    return {
        "message": "Login successful",
        "success": True,
        "token": result.token,
        "user": result.user.as_dict(),
    }


@router.post("/forgot-password")
def forgot_password(payload: Optional[EmailPayload] = None, service: AuthService = Depends(get_auth_service)):
    ack = service.forgot_password((payload or EmailPayload()).email)
    return {"message": ack.message}


@router.post("/reset-password")
def reset_password(payload: Optional[ResetPasswordPayload] = None, service: AuthService = Depends(get_auth_service)):
    payload = payload or ResetPasswordPayload()
    service.reset_password(payload.token, payload.password)
    return {"message": "Password reset successfully"}


@router.post("/resend-verification")
def resend_verification(payload: Optional[EmailPayload] = None, service: AuthService = Depends(get_auth_service)):
    service.resend_verification((payload or EmailPayload()).email)
    return {"message": "Verification email sent successfully"}
