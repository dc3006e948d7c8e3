"""SMTP mailer on aiosmtplib."""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr

import aiosmtplib
from loguru import logger

from hkapi.core.exceptions import MailDeliveryError
from hkapi.utils.masking import mask_email

from .base import Mailer, SmtpConfig


class SmtpMailer(Mailer):
    """Mailer that delivers through an SMTP relay with STARTTLS."""

    def __init__(self, config: SmtpConfig):
        """
        Initialize SMTP mailer.

        Args:
            config: SMTP configuration
        """
        self._config = config

    @property
    def configured(self) -> bool:
        """True when credentials are present."""
        return bool(self._config.username and self._config.password)

    def _build_message(self, to: str, subject: str, html_body: str, text_body: str) -> MIMEMultipart:
        sender = self._config.sender or self._config.username or ""
        message = MIMEMultipart("alternative")
        message["From"] = formataddr((self._config.sender_name or "", sender))
        message["To"] = to
        message["Subject"] = subject
        message.attach(MIMEText(text_body, "plain"))
        message.attach(MIMEText(html_body, "html"))
        return message

    async def send(self, to: str, subject: str, html_body: str, text_body: str) -> None:
        if not self.configured:
            logger.error("Email credentials missing")
            raise MailDeliveryError("Email credentials missing")

        message = self._build_message(to, subject, html_body, text_body)
        try:
            async with aiosmtplib.SMTP(
                hostname=self._config.smtp_server,
                port=self._config.smtp_port,
                start_tls=True,
                cert_bundle=self._config.ca_bundle,
            ) as smtp:
                await smtp.login(self._config.username or "", self._config.password or "")
                await smtp.send_message(message)
        except (aiosmtplib.SMTPException, ConnectionError, TimeoutError, OSError) as e:
            logger.error(f"Email to {mask_email(to)} failed: {e}")
            raise MailDeliveryError(f"Email delivery failed: {e}") from e

        logger.info(f"Email sent to {mask_email(to)}")
