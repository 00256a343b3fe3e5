import pytest
import pytest_asyncio
import sys
import os
from typing import List

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import httpx
from httpx import ASGITransport

from orderdesk.config import Settings
from orderdesk.errors import NotificationError, PersistenceError
from orderdesk.main import create_app
from orderdesk.storage import InMemoryStorage


class FakeMailer:
    """Records orders instead of talking SMTP."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: List = []
        self.attempts = 0

    def send_order_notification(self, order):
        self.attempts += 1
        if self.fail:
            raise NotificationError("SMTP connection refused")
        self.sent.append(order)

    def verify(self):
        return True


class FakeLedger:
    """Records orders and the totals it was handed instead of calling Sheets."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.recorded: List = []
        self.attempts = 0

    def record_order(self, order, totals_provider=None):
        self.attempts += 1
        if self.fail:
            raise NotificationError("Sheets quota exceeded")
        totals = totals_provider() if totals_provider else None
        self.recorded.append((order, totals))
        return True


class BrokenStorage(InMemoryStorage):
    """Storage whose writes always fail."""

    def save_order(self, submission):
        raise PersistenceError("database is unavailable")

    def ping(self):
        return False


@pytest.fixture
def settings(tmp_path):
    """Settings with no ledger credentials, no log file."""
    return Settings(
        environment="test",
        storage_backend="inmemory",
        log_file=None,
        google_credentials_file=str(tmp_path / "no-credentials.json"),
    )


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def fake_mailer():
    return FakeMailer()


@pytest.fixture
def fake_ledger():
    return FakeLedger()


@pytest.fixture
def valid_payload():
    return {
        "name": "Jane",
        "sender_number": "0820000000",
        "receiver_name": "Thandi",
        "receiver_number": "0831111111",
        "products": ["DONSA (x2)", "UNKNOWNTHING (x1)"],
    }


@pytest.fixture
def make_app(settings, storage, fake_mailer, fake_ledger):
    """Build an app; keyword arguments override the default fakes."""

    def _make(**overrides):
        kwargs = {
            "settings": settings,
            "storage": storage,
            "mailer": fake_mailer,
            "ledger": fake_ledger,
            "setup_logging": False,
        }
        kwargs.update(overrides)
        return create_app(**kwargs)

    return _make


@pytest_asyncio.fixture
async def async_client(make_app):
    """Async HTTP client against an app with in-memory storage and fake sinks."""
    app = make_app()
    async with httpx.AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


def client_for(app):
    return httpx.AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
