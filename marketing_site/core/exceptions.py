# marketing_site/core/exceptions.py
from __future__ import annotations

from typing import Any, Dict, Optional


class BaseAPIException(Exception):
    """Base exception for all API errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


# Submission validation

class SubmissionValidationError(BaseAPIException):
    """A submitted form field failed sanitisation or validation."""
    default_code = "invalid_input"

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        kwargs.setdefault("code", self.default_code)
        kwargs.setdefault("details", {"field": field} if field else {})
        super().__init__(message, status_code=400, **kwargs)
        self.field = field


class MissingField(SubmissionValidationError):
    default_code = "missing_field"


class FieldTooLong(SubmissionValidationError):
    default_code = "field_too_long"


class InvalidEmail(SubmissionValidationError):
    default_code = "invalid_email"


class InvalidPhone(SubmissionValidationError):
    default_code = "invalid_phone"


class InvalidDeviceRange(SubmissionValidationError):
    default_code = "invalid_device_range"


# Email transport

class EmailTransportError(BaseAPIException):
    """Sending an email through the provider failed."""
    def __init__(self, message: str = "Email delivery failed", **kwargs):
        super().__init__(message, status_code=500, **kwargs)


class TransportUnconfigured(EmailTransportError):
    """No provider credential is configured."""
    def __init__(self, message: str = "SENDGRID_API_KEY environment variable not set", **kwargs):
        kwargs.setdefault("code", "transport_unconfigured")
        super().__init__(message, **kwargs)


class TransportRejected(EmailTransportError):
    """The provider answered with an error status, or could not be reached."""
    def __init__(
        self,
        message: str = "Email provider rejected the message",
        provider_status: Optional[int] = None,
        provider_body: Optional[str] = None,
        **kwargs,
    ):
        kwargs.setdefault("code", "transport_rejected")
        super().__init__(message, **kwargs)
        self.provider_status = provider_status
        self.provider_body = provider_body
