"""Application services."""

from hkapi.services.auth import OtpAuthenticator
from hkapi.services.cleanup_service import NotificationRetentionSweeper
from hkapi.services.mail import Mailer, SmtpConfig, SmtpMailer
from hkapi.services.webhooks import BookingIngestor, IngestResult

__all__ = [
    "BookingIngestor",
    "IngestResult",
    "Mailer",
    "NotificationRetentionSweeper",
    "OtpAuthenticator",
    "SmtpConfig",
    "SmtpMailer",
]
