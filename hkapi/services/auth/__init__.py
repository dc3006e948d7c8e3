"""Authentication services."""

from .otp_authenticator import OtpAuthenticator

__all__ = ["OtpAuthenticator"]
