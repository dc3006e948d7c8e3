"""Pytest configuration and common fixtures."""

import os
import sys
import warnings
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Tuple

from dotenv import load_dotenv

# Try to load test-specific environment file if it exists
test_env_file = Path(__file__).parent / ".env.test"
if test_env_file.exists():
    load_dotenv(test_env_file)

# Bootstrap variables for imports that build settings at module load.
# Per-test isolation is provided by the setup_test_environment fixture.
os.environ.setdefault("ENV", "testing")
os.environ.setdefault("DATABASE_URL", "memory://")

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from hkapi.core.exceptions import MailDeliveryError
from hkapi.repositories import NotificationRepository, OtpRepository, UserRepository
from hkapi.services.mail.base import Mailer
from hkapi.storage import DocumentStoreFactory, InMemoryDocumentStore

START_TIME = datetime(2026, 1, 15, 6, 30, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = START_TIME):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingMailer(Mailer):
    """Mailer that keeps sent messages in memory, or fails on demand."""

    def __init__(self):
        self.sent: List[Tuple[str, str, str, str]] = []
        self.fail = False

    async def send(self, to: str, subject: str, html_body: str, text_body: str) -> None:
        if self.fail:
            raise MailDeliveryError("SMTP relay refused connection")
        self.sent.append((to, subject, html_body, text_body))


def pytest_configure(config):
    """Configure pytest environment before tests run."""
    warnings.filterwarnings("ignore", message="coroutine.*was never awaited")


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Automatically set up test environment for all tests."""
    monkeypatch.setenv("ENV", "testing")
    monkeypatch.setenv("DATABASE_URL", "memory://")
    monkeypatch.setenv("TIMEZONE", "Asia/Dhaka")
    for var in ("SMTP_USERNAME", "SMTP_PASSWORD", "SMTP_CA_BUNDLE", "EMAIL_FROM", "WEBHOOK_DEDUP_ENABLED"):
        monkeypatch.delenv(var, raising=False)

    # Reset singletons so each test gets fresh settings and store
    from hkapi.core.config.settings import reset_settings

    reset_settings()
    DocumentStoreFactory.reset_instance()

    yield

    reset_settings()
    DocumentStoreFactory.reset_instance()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> InMemoryDocumentStore:
    """Connected in-memory store stamping writes with the fake clock."""
    return InMemoryDocumentStore(clock=clock)


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def users(store) -> UserRepository:
    return UserRepository(store)


@pytest.fixture
def challenges(store) -> OtpRepository:
    return OtpRepository(store)


@pytest.fixture
def notifications(store) -> NotificationRepository:
    return NotificationRepository(store)
