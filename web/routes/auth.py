"""Email OTP login routes."""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from hkapi.services.auth import OtpAuthenticator
from web.dependencies import get_otp_authenticator
from web.models import SendOtpRequest, VerifyOtpRequest
from web.rate_limit import limiter, otp_rate_limit

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/send-otp")
@limiter.limit(otp_rate_limit)
async def send_otp(
    request: Request,
    body: SendOtpRequest,
    authenticator: OtpAuthenticator = Depends(get_otp_authenticator),
) -> Dict[str, Any]:
    """
    Email a login code to a registered user.

    Raises:
        UserNotFoundError: No user owns the address (404)
        DeliveryFailedError: The email could not be sent (500)
    """
    await authenticator.request_challenge(body.email)
    return {"success": True, "message": "OTP sent"}


@router.post("/verify-otp")
async def verify_otp(
    body: VerifyOtpRequest,
    authenticator: OtpAuthenticator = Depends(get_otp_authenticator),
) -> Dict[str, Any]:
    """
    Exchange a login code for the user's record.

    Raises:
        OTPError: No challenge, expired, invalid or exhausted (400)
    """
    user = await authenticator.verify(body.email, body.otp)
    return {"success": True, "user": user}
