"""Tests for services/mail package."""

import socket
import ssl
from email import message_from_bytes
from unittest.mock import AsyncMock, MagicMock, patch

import aiosmtplib
import pytest
import trustme
from aiosmtpd.controller import Controller
from aiosmtpd.smtp import AuthResult

from hkapi.core.config.settings import HKSettings
from hkapi.core.exceptions import MailDeliveryError
from hkapi.services.mail import SmtpConfig, SmtpMailer, otp_email


def _smtp_mock():
    smtp = MagicMock()
    smtp.login = AsyncMock()
    smtp.send_message = AsyncMock()
    smtp.__aenter__ = AsyncMock(return_value=smtp)
    smtp.__aexit__ = AsyncMock(return_value=False)
    return smtp


@pytest.fixture
def config():
    return SmtpConfig(
        username="frontdesk@example.com",
        password="app-password",
        sender="frontdesk@example.com",
        sender_name="Miami Beach Resort",
    )


class TestOtpEmail:
    """Tests for the login code template."""

    def test_subject_and_bodies(self):
        subject, html_body, text_body = otp_email("482913", "Miami Beach Resort", 10)

        assert subject == "Your Login Code - Miami Beach Resort"
        assert "482913" in html_body
        assert "This code expires in 10 minutes." in html_body
        assert "Your login code is: 482913" in text_body

    def test_property_name_is_escaped(self):
        _, html_body, _ = otp_email("482913", "<Resort & Spa>", 10)
        assert "&lt;Resort &amp; Spa&gt;" in html_body


class TestSmtpConfig:
    """Tests for SMTP configuration."""

    def test_repr_masks_password(self, config):
        assert "app-password" not in repr(config)
        assert "'***'" in repr(config)

    def test_from_settings(self, monkeypatch):
        monkeypatch.setenv("SMTP_USERNAME", "frontdesk@example.com")
        monkeypatch.setenv("SMTP_PASSWORD", "app-password")
        monkeypatch.setenv("EMAIL_FROM", "noreply@example.com")

        config = SmtpConfig.from_settings(HKSettings())

        assert config.password == "app-password"
        assert config.sender == "noreply@example.com"
        assert config.sender_name == "Miami Beach Resort"


class TestSmtpMailer:
    """Tests for SmtpMailer."""

    @pytest.mark.asyncio
    async def test_send_success(self, config):
        smtp = _smtp_mock()
        with patch("hkapi.services.mail.smtp.aiosmtplib.SMTP", return_value=smtp) as smtp_cls:
            await SmtpMailer(config).send("maria@example.com", "Subject", "<p>hi</p>", "hi")

        assert smtp_cls.call_args.kwargs["start_tls"] is True
        smtp.starttls.assert_not_called()
        smtp.login.assert_awaited_once_with("frontdesk@example.com", "app-password")
        message = smtp.send_message.await_args.args[0]
        assert message["To"] == "maria@example.com"
        assert message["Subject"] == "Subject"
        assert "Miami Beach Resort" in message["From"]

    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        mailer = SmtpMailer(SmtpConfig())
        assert not mailer.configured
        with pytest.raises(MailDeliveryError):
            await mailer.send("maria@example.com", "Subject", "<p>hi</p>", "hi")

    @pytest.mark.asyncio
    async def test_smtp_error_raises_delivery_error(self, config):
        smtp = _smtp_mock()
        smtp.login = AsyncMock(side_effect=aiosmtplib.SMTPAuthenticationError(535, "bad credentials"))
        with patch("hkapi.services.mail.smtp.aiosmtplib.SMTP", return_value=smtp):
            with pytest.raises(MailDeliveryError):
                await SmtpMailer(config).send("maria@example.com", "Subject", "<p>hi</p>", "hi")

        smtp.send_message.assert_not_awaited()


class _CollectingHandler:
    def __init__(self):
        self.envelopes = []

    async def handle_DATA(self, server, session, envelope):
        self.envelopes.append(envelope)
        return "250 Message accepted for delivery"


def _check_login(server, session, envelope, mechanism, auth_data):
    ok = auth_data.login == b"frontdesk@example.com" and auth_data.password == b"app-password"
    return AuthResult(success=ok)


def _free_port() -> int:
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def starttls_relay(tmp_path):
    """Local SMTP relay that requires STARTTLS before AUTH."""
    ca = trustme.CA()
    server_context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
    ca.issue_cert("127.0.0.1").configure_cert(server_context)
    ca_file = tmp_path / "ca.pem"
    ca.cert_pem.write_to_path(str(ca_file))

    handler = _CollectingHandler()
    controller = Controller(
        handler,
        hostname="127.0.0.1",
        port=_free_port(),
        tls_context=server_context,
        require_starttls=True,
        authenticator=_check_login,
        auth_require_tls=True,
    )
    controller.start()
    yield controller, handler, str(ca_file)
    controller.stop()


class TestSmtpMailerAgainstRelay:
    """SmtpMailer talking to a real STARTTLS relay."""

    @pytest.mark.asyncio
    async def test_delivers_over_starttls(self, starttls_relay):
        controller, handler, ca_file = starttls_relay
        config = SmtpConfig(
            smtp_server="127.0.0.1",
            smtp_port=controller.port,
            username="frontdesk@example.com",
            password="app-password",
            sender="frontdesk@example.com",
            ca_bundle=ca_file,
        )

        await SmtpMailer(config).send(
            "maria@example.com", "Your Login Code", "<p>482913</p>", "Your login code is: 482913"
        )

        assert len(handler.envelopes) == 1
        envelope = handler.envelopes[0]
        assert envelope.rcpt_tos == ["maria@example.com"]
        assert message_from_bytes(envelope.content)["Subject"] == "Your Login Code"

    @pytest.mark.asyncio
    async def test_rejected_login_raises_delivery_error(self, starttls_relay):
        controller, handler, ca_file = starttls_relay
        config = SmtpConfig(
            smtp_server="127.0.0.1",
            smtp_port=controller.port,
            username="frontdesk@example.com",
            password="wrong",
            ca_bundle=ca_file,
        )

        with pytest.raises(MailDeliveryError):
            await SmtpMailer(config).send("maria@example.com", "Subject", "<p>hi</p>", "hi")
        assert handler.envelopes == []
