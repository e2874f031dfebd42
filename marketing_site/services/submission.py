# marketing_site/services/submission.py
"""
Contact form submission pipeline.

Each submission runs once, synchronously, through:

    rate check -> sanitise/validate -> compose -> send notification
               -> (optional) send confirmation

and ends in exactly one Outcome. Nothing is retried.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from marketing_site.core.config import Settings
from marketing_site.core.exceptions import EmailTransportError, SubmissionValidationError
from marketing_site.core.logging import get_structlog_logger
from marketing_site.services.email_composer import (
    EmailAddress,
    compose_confirmation,
    compose_notification,
)
from marketing_site.services.email_transport import EmailTransport
from marketing_site.services.rate_limiter import SlidingWindowRateLimiter
from marketing_site.services.validation import sanitize_and_validate

logger = get_structlog_logger(__name__)

RATE_LIMITED_MESSAGE = "Too many requests. Please wait a few minutes before trying again."
INVALID_MESSAGE = "Please check your input and try again."
SUCCESS_MESSAGE = "We've received your request and will get back to you within 1 business day."
SEND_FAILED_MESSAGE = "Failed to send your request. Please try again or email us directly at {email}"


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    RATE_LIMITED = "rate_limited"
    INVALID = "invalid"
    SEND_FAILED = "send_failed"


_STATUS_CODES = {
    OutcomeKind.SUCCESS: 200,
    OutcomeKind.RATE_LIMITED: 429,
    OutcomeKind.INVALID: 400,
    OutcomeKind.SEND_FAILED: 500,
}


@dataclass(frozen=True)
class Outcome:
    kind: OutcomeKind
    message: str
    retry_after: Optional[int] = None

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self.kind]

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS


class SubmissionPipeline:
    def __init__(
        self,
        *,
        rate_limiter: SlidingWindowRateLimiter,
        transport: EmailTransport,
        sender: EmailAddress,
        recipient: EmailAddress,
        send_confirmation: bool = True,
        site_name: str = "RobusTest",
    ) -> None:
        self.rate_limiter = rate_limiter
        self.transport = transport
        self.sender = sender
        self.recipient = recipient
        self.send_confirmation = send_confirmation
        self.site_name = site_name

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        rate_limiter: SlidingWindowRateLimiter,
        transport: EmailTransport,
    ) -> "SubmissionPipeline":
        return cls(
            rate_limiter=rate_limiter,
            transport=transport,
            sender=EmailAddress(settings.contact_from_email, settings.contact_from_name),
            recipient=EmailAddress(settings.contact_to_email, settings.contact_to_name),
            send_confirmation=settings.contact_send_confirmation,
            site_name=settings.site_name,
        )

    def submit(self, client_key: str, raw_fields: Mapping[str, Optional[str]]) -> Outcome:
        log = logger.bind(client_id=client_key)

        if not self.rate_limiter.admit(client_key):
            retry_after = self.rate_limiter.retry_after(client_key)
            log.warning("contact.rate_limited", retry_after=retry_after)
            return Outcome(OutcomeKind.RATE_LIMITED, RATE_LIMITED_MESSAGE, retry_after=retry_after or None)

        try:
            submission = sanitize_and_validate(raw_fields)
        except SubmissionValidationError as e:
            log.warning("contact.invalid", code=e.code, field=e.field, error=e.message)
            return Outcome(OutcomeKind.INVALID, INVALID_MESSAGE)

        notification = compose_notification(
            submission,
            sender=self.sender,
            recipient=self.recipient,
            site_name=self.site_name,
        )
        try:
            self.transport.send(notification)
        except EmailTransportError as e:
            log.error(
                "contact.email_failed",
                code=e.code,
                error=e.message,
                provider_status=getattr(e, "provider_status", None),
                provider_body=getattr(e, "provider_body", None),
            )
            return Outcome(OutcomeKind.SEND_FAILED, SEND_FAILED_MESSAGE.format(email=self.recipient.email))

        log.info(
            "contact.submitted",
            name=submission.full_name,
            email=submission.email,
            company=submission.company,
        )

        if self.send_confirmation:
            self._send_confirmation(submission, log)

        return Outcome(OutcomeKind.SUCCESS, SUCCESS_MESSAGE)

    def _send_confirmation(self, submission, log) -> None:
        confirmation = compose_confirmation(
            submission,
            sender=self.sender,
            reply_to=self.recipient,
            site_name=self.site_name,
        )
        try:
            self.transport.send(confirmation)
        except EmailTransportError as e:
            # Best effort; the notification already went out
            log.warning("contact.confirmation_failed", code=e.code, error=e.message)
        except Exception as e:
            log.error(
                "contact.confirmation_failed",
                code="unexpected_error",
                error=str(e),
                exc_info=True,
            )
