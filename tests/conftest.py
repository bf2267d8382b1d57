"""
Pytest configuration and fixtures for all tests.
"""

import os
import threading

import pytest

# Set up test environment variables before importing any application modules
os.environ.setdefault("RESEND_API_KEY", "re_test_key")
os.environ.setdefault("NOMINATION_ADMIN_EMAIL", "thecoterie@promontoryai.com")
os.environ.setdefault("VALIDATE_SUBMISSIONS", "true")
os.environ.setdefault("LOG_LEVEL", "INFO")

from coterie_nominations.dispatcher import NotificationDispatcher, get_dispatcher, reset_dispatcher
from coterie_nominations.models import NominationSubmission
from coterie_nominations.transport import MailTransport, ResendTransport, TransportError

ADMIN_EMAIL = "thecoterie@promontoryai.com"


class FakeTransport(MailTransport):
    """In-memory transport that records every message it is handed"""

    name = "fake"

    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.sent = []
        self.attempted = []
        self._lock = threading.Lock()

    def send(self, message):
        with self._lock:
            self.attempted.append(message)
        if message.to in self.fail_for:
            raise TransportError(f"rejected recipient {message.to}", recipient=message.to)
        with self._lock:
            self.sent.append(message)
        return f"fake-{len(self.attempted)}"


def self_payload(**overrides) -> dict:
    payload = {
        "nominationType": "self",
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "title": "CTO",
        "company": "Acme",
        "linkedin": "https://linkedin.com/in/ada",
        "community": "AI",
        "qualification": "Built the first algorithm.",
    }
    payload.update(overrides)
    return payload


def peer_payload(**overrides) -> dict:
    payload = self_payload(
        nominationType="peer",
        nominatorName="Charles Babbage",
        nominatorEmail="charles@example.com",
    )
    payload.update(overrides)
    return payload


@pytest.fixture(autouse=True)
def reset_resend_key():
    """Each test starts with no Resend key claimed by an earlier transport"""
    ResendTransport._installed_key = None
    yield
    ResendTransport._installed_key = None


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def dispatcher(transport):
    return NotificationDispatcher(
        transport,
        admin_email=ADMIN_EMAIL,
        from_address="The Coterie <onboarding@resend.dev>",
    )


@pytest.fixture
def self_submission():
    return NominationSubmission(**self_payload())


@pytest.fixture
def peer_submission():
    return NominationSubmission(**peer_payload())


@pytest.fixture
def client(dispatcher):
    from fastapi.testclient import TestClient
    from coterie_nominations.main import app

    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    reset_dispatcher()
