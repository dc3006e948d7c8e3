"""Mailer contract and SMTP configuration."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from hkapi.core.config.settings import HKSettings


@dataclass
class SmtpConfig:
    """SMTP relay configuration."""

    smtp_server: str = "smtp.gmail.com"
    smtp_port: int = 587
    username: Optional[str] = None
    password: Optional[str] = None
    sender: Optional[str] = None
    sender_name: Optional[str] = None
    # CA file trusted for the STARTTLS handshake, system store when None
    ca_bundle: Optional[str] = None

    def __repr__(self) -> str:
        """Return repr with masked password."""
        masked_password = "'***'" if self.password else "None"
        return (
            f"SmtpConfig(smtp_server='{self.smtp_server}', smtp_port={self.smtp_port}, "
            f"username='{self.username}', password={masked_password})"
        )

    @classmethod
    def from_settings(cls, settings: HKSettings) -> "SmtpConfig":
        """Build SMTP configuration from application settings."""
        return cls(
            smtp_server=settings.smtp_server,
            smtp_port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password.get_secret_value() if settings.smtp_password else None,
            sender=settings.sender_address,
            sender_name=settings.property_name,
            ca_bundle=settings.smtp_ca_bundle,
        )


class Mailer(ABC):
    """Sends one email to one address; succeeds or raises per call."""

    @abstractmethod
    async def send(self, to: str, subject: str, html_body: str, text_body: str) -> None:
        """
        Send an email.

        Args:
            to: Recipient address
            subject: Subject line
            html_body: HTML body
            text_body: Plain-text alternative

        Raises:
            MailDeliveryError: If the message could not be sent
        """
