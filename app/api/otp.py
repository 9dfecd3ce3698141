"""
app/api/otp.py

Purpose: OTP endpoint

- action "request": email a fresh 6-digit code to a known user
- action "reset": verify the code and set a new password hash
"""

from typing import Optional

from fastapi import APIRouter, Depends

from app.api.dependencies import get_otp_manager
from app.core.exceptions import UnsupportedAction, ValidationError
from app.core.logging import get_logger
from app.schemas.otp import OtpActionRequest
from app.schemas.response import OkResponse
from app.services.otp_service import OtpManager
from utils.constants import ACTION_REQUEST, ACTION_RESET

logger = get_logger(__name__)
router = APIRouter()


@router.post("/otp", response_model=OkResponse)
async def otp_action(
    payload: Optional[OtpActionRequest] = None,
    manager: OtpManager = Depends(get_otp_manager),
):
    """
    Dispatches on `action`.

    Status codes:
        400: missing/unsupported action, missing fields, no/expired/wrong OTP
        404: unknown user
        500: missing credentials, GitHub or Resend failure
    """
    payload = payload or OtpActionRequest()

    if not payload.action:
        raise ValidationError("Missing action")

    if payload.action == ACTION_REQUEST:
        await manager.request_otp(payload.email)
    elif payload.action == ACTION_RESET:
        await manager.reset_password(payload.email, payload.otp, payload.new_password_hash)
    else:
        logger.info(f"Unsupported OTP action: {payload.action}")
        raise UnsupportedAction()

    return OkResponse()
