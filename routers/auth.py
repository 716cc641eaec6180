"""
Authentication Router

Passwordless sign-in: email a one-time passcode, exchange it for a JWT.
"""
import logging
from datetime import timedelta

from fastapi import APIRouter, Depends

from core.auth import get_current_user
from core.config import Settings
from core.dependencies import get_app_settings, get_email_service, get_otp_store
from core.exceptions import BadGatewayError, ValidationError
from core.security import create_access_token
from schemas import (
    SendOTPRequest,
    SendOTPResponse,
    TokenResponse,
    UserIdentity,
    VerifyOTPRequest,
)
from services.email_service import EmailService
from services.otp_service import OTPStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/send-otp", response_model=SendOTPResponse)
async def send_otp(
    request: SendOTPRequest,
    email_service: EmailService = Depends(get_email_service),
    otp_store: OTPStore = Depends(get_otp_store),
):
    """Issue a verification code and email it."""
    email = request.email.lower()
    otp = otp_store.issue(email)

    delivered = await email_service.send_email_otp(email, otp)
    if not delivered:
        otp_store.discard(email)
        raise BadGatewayError("Failed to send verification code. Please try again.")

    return SendOTPResponse(success=True, message="Verification code sent")


@router.post("/verify-otp", response_model=TokenResponse)
async def verify_otp(
    request: VerifyOTPRequest,
    otp_store: OTPStore = Depends(get_otp_store),
    settings: Settings = Depends(get_app_settings),
):
    """Exchange a valid code for an access token."""
    email = request.email.lower()
    if not otp_store.verify(email, request.otp):
        logger.info(f"Rejected verification code for {email}")
        raise ValidationError("Invalid or expired verification code")

    token = create_access_token(
        {"sub": email},
        settings.JWT_SECRET,
        expires_delta=timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
    )
    return TokenResponse(token=token, user=UserIdentity(email=email))


@router.get("/me", response_model=UserIdentity)
async def me(user: UserIdentity = Depends(get_current_user)):
    return user
