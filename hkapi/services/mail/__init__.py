"""Outbound email."""

from .base import Mailer, SmtpConfig
from .smtp import SmtpMailer
from .templates import otp_email

__all__ = ["Mailer", "SmtpConfig", "SmtpMailer", "otp_email"]
