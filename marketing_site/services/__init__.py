# marketing_site/services/__init__.py
"""
Contact form services: rate limiting, validation, email composition and delivery.
"""

from marketing_site.services.email_composer import (
    EmailAddress,
    EmailMessage,
    compose_confirmation,
    compose_notification,
)
from marketing_site.services.email_transport import EmailTransport, SendGridTransport
from marketing_site.services.rate_limiter import SlidingWindowRateLimiter
from marketing_site.services.submission import Outcome, OutcomeKind, SubmissionPipeline
from marketing_site.services.validation import Submission, sanitize_and_validate

__all__ = [
    # Rate limiting
    "SlidingWindowRateLimiter",
    # Validation
    "Submission",
    "sanitize_and_validate",
    # Email
    "EmailAddress",
    "EmailMessage",
    "EmailTransport",
    "SendGridTransport",
    "compose_confirmation",
    "compose_notification",
    # Pipeline
    "Outcome",
    "OutcomeKind",
    "SubmissionPipeline",
]
