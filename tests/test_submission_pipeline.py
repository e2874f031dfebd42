from structlog.testing import capture_logs

from conftest import VALID_FIELDS, FakeTransport
from marketing_site.core.exceptions import TransportRejected
from marketing_site.services.email_transport import SendGridTransport
from marketing_site.services.submission import OutcomeKind


def _events(logs):
    return [entry["event"] for entry in logs]


def test_success_sends_notification_then_confirmation(pipeline, transport):
    outcome = pipeline.submit("10.0.0.1", VALID_FIELDS)

    assert outcome.kind is OutcomeKind.SUCCESS
    assert outcome.status_code == 200
    assert outcome.ok

    notification, confirmation = transport.sent
    assert notification.to_address.email == "hello@robustest.com"
    assert notification.subject == "New Demo Request from Ada Lovelace - Analytical Engines"
    assert confirmation.to_address.email == "ada@example.com"


def test_confirmation_can_be_disabled(make_pipeline):
    transport = FakeTransport()
    pipeline = make_pipeline(transport, send_confirmation=False)

    assert pipeline.submit("10.0.0.1", VALID_FIELDS).ok
    assert len(transport.sent) == 1


def test_rate_limited_after_limit(pipeline, transport):
    for _ in range(5):
        assert pipeline.submit("10.0.0.1", VALID_FIELDS).ok

    with capture_logs() as logs:
        outcome = pipeline.submit("10.0.0.1", VALID_FIELDS)

    assert outcome.kind is OutcomeKind.RATE_LIMITED
    assert outcome.status_code == 429
    assert outcome.retry_after == 300
    assert "contact.rate_limited" in _events(logs)
    # 5 notifications + 5 confirmations, nothing for the rejected attempt
    assert transport.attempts == 10


def test_rate_limit_counts_invalid_attempts(pipeline):
    for _ in range(5):
        assert pipeline.submit("10.0.0.1", {"email": "junk"}).kind is OutcomeKind.INVALID

    assert pipeline.submit("10.0.0.1", VALID_FIELDS).kind is OutcomeKind.RATE_LIMITED


def test_invalid_email_is_rejected_without_sending(pipeline, transport):
    fields = dict(VALID_FIELDS, email="not-an-email")

    with capture_logs() as logs:
        outcome = pipeline.submit("10.0.0.1", fields)

    assert outcome.kind is OutcomeKind.INVALID
    assert outcome.status_code == 400
    assert outcome.message == "Please check your input and try again."
    assert transport.attempts == 0
    invalid = [entry for entry in logs if entry["event"] == "contact.invalid"]
    assert invalid[0]["code"] == "invalid_email"


def test_unconfigured_transport_fails_with_generic_message(make_pipeline):
    pipeline = make_pipeline(SendGridTransport(None))

    with capture_logs() as logs:
        outcome = pipeline.submit("10.0.0.1", VALID_FIELDS)

    assert outcome.kind is OutcomeKind.SEND_FAILED
    assert outcome.status_code == 500
    assert "SENDGRID_API_KEY" not in outcome.message
    assert "hello@robustest.com" in outcome.message

    failed = [entry for entry in logs if entry["event"] == "contact.email_failed"]
    assert len(failed) == 1
    assert failed[0]["code"] == "transport_unconfigured"
    assert "SENDGRID_API_KEY" in failed[0]["error"]
    assert failed[0]["log_level"] == "error"


def test_provider_rejection_detail_is_logged_not_returned(make_pipeline):
    pipeline = make_pipeline(FakeTransport(fail_on={1}))

    with capture_logs() as logs:
        outcome = pipeline.submit("10.0.0.1", VALID_FIELDS)

    assert outcome.kind is OutcomeKind.SEND_FAILED
    assert "bad request" not in outcome.message
    failed = [entry for entry in logs if entry["event"] == "contact.email_failed"]
    assert failed[0]["provider_status"] == 400
    assert "bad request" in failed[0]["provider_body"]


def test_failed_notification_skips_confirmation(make_pipeline):
    transport = FakeTransport(fail_on={1})
    make_pipeline(transport).submit("10.0.0.1", VALID_FIELDS)
    assert transport.attempts == 1


def test_confirmation_failure_does_not_change_outcome(make_pipeline):
    transport = FakeTransport(fail_on={2}, error=TransportRejected("sendgrid returned status 500"))
    pipeline = make_pipeline(transport)

    with capture_logs() as logs:
        outcome = pipeline.submit("10.0.0.1", VALID_FIELDS)

    assert outcome.kind is OutcomeKind.SUCCESS
    assert outcome.status_code == 200
    assert len(transport.sent) == 1
    events = _events(logs)
    assert "contact.submitted" in events
    assert "contact.confirmation_failed" in events
    assert "contact.email_failed" not in events


def test_unexpected_confirmation_error_still_succeeds(make_pipeline):
    transport = FakeTransport(fail_on={2}, error=RuntimeError("boom"))
    pipeline = make_pipeline(transport)

    with capture_logs() as logs:
        outcome = pipeline.submit("10.0.0.1", VALID_FIELDS)

    assert outcome.kind is OutcomeKind.SUCCESS
    assert len(transport.sent) == 1
    failure = next(log for log in logs if log["event"] == "contact.confirmation_failed")
    assert failure["log_level"] == "error"
    assert failure["error"] == "boom"
