"""
app/schemas/otp.py

Purpose: OTP endpoint payload schema

- One body shape for both "request" and "reset" actions
- Field presence is checked by the OTP manager, not here, so that
  missing fields map to the documented 400 messages
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Union


class OtpActionRequest(BaseModel):
    """
    Body of POST /otp.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "action": "reset",
                "email": "dealer@example.com",
                "otp": "482913",
                "newPasswordHash": "5e884898da28047151d0e56f8dc62927..."
            }
        }
    )

    action: Optional[str] = Field(None, description='"request" or "reset"')
    email: Optional[Union[str, int]] = Field(None, description="Account email (case-insensitive)")
    otp: Optional[Union[str, int]] = Field(None, description="6-digit code received by email")
    new_password_hash: Optional[str] = Field(
        None,
        alias="newPasswordHash",
        description="Client-side hash of the new password"
    )
