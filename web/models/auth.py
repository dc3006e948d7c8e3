"""Authentication models."""

from typing import Union

from pydantic import BaseModel, field_validator


class SendOtpRequest(BaseModel):
    """Send-OTP request model."""

    email: str


class VerifyOtpRequest(BaseModel):
    """Verify-OTP request model. Numeric codes are accepted."""

    email: str
    otp: Union[str, int]

    @field_validator("otp", mode="after")
    @classmethod
    def normalize_otp(cls, v: Union[str, int]) -> str:
        return str(v).strip()
