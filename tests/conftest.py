import os

# Must be set before the settings object is created on first import
os.environ["ENVIRONMENT"] = "testing"
os.environ["SENDGRID_API_KEY"] = ""
os.environ["LOG_LEVEL"] = "DEBUG"

import pytest
import structlog
from fastapi.testclient import TestClient

from marketing_site.core.exceptions import TransportRejected
from marketing_site.main import app
from marketing_site.routes.contact import get_pipeline
from marketing_site.services.email_composer import EmailAddress
from marketing_site.services.rate_limiter import SlidingWindowRateLimiter
from marketing_site.services.submission import SubmissionPipeline

# capture_logs only sees loggers that are not cached on first use
structlog.configure(cache_logger_on_first_use=False)


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTransport:
    """Records sent messages; fails the sends whose 1-based index is in ``fail_on``."""

    def __init__(self, fail_on=(), error=None):
        self.sent = []
        self.attempts = 0
        self.fail_on = set(fail_on)
        self.error = error

    def send(self, message):
        self.attempts += 1
        if self.attempts in self.fail_on:
            raise self.error or TransportRejected(
                "sendgrid returned status 400",
                provider_status=400,
                provider_body='{"errors":[{"message":"bad request"}]}',
            )
        self.sent.append(message)


VALID_FORM = {
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": "Ada@Example.com",
    "company": "Analytical Engines",
    "phone": "+1 (555) 123-4567",
    "devices": "11-50",
    "message": "We test on 40 devices.\nNeed a demo.",
}

VALID_FIELDS = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "ada@example.com",
    "company": "Analytical Engines",
    "phone": "+1 (555) 123-4567",
    "devices": "11-50",
    "message": "We test on 40 devices.\nNeed a demo.",
}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rate_limiter(clock):
    return SlidingWindowRateLimiter(limit=5, window=300, clock=clock)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def sender():
    return EmailAddress("noreply@robustest.com", "RobusTest Website")


@pytest.fixture
def recipient():
    return EmailAddress("hello@robustest.com", "RobusTest Team")


@pytest.fixture
def make_pipeline(rate_limiter, sender, recipient):
    def _make(transport, send_confirmation=True):
        return SubmissionPipeline(
            rate_limiter=rate_limiter,
            transport=transport,
            sender=sender,
            recipient=recipient,
            send_confirmation=send_confirmation,
        )
    return _make


@pytest.fixture
def pipeline(make_pipeline, transport):
    return make_pipeline(transport)


@pytest.fixture
def client(pipeline):
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
