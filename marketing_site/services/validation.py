# marketing_site/services/validation.py
"""Sanitisation and validation of contact form submissions."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, Mapping, Optional

from marketing_site.core.exceptions import (
    FieldTooLong,
    InvalidDeviceRange,
    InvalidEmail,
    InvalidPhone,
    MissingField,
)

_EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}")
# ASCII digits and whitespace only
_PHONE_PATTERN = re.compile(r"[\d\s\-+()]{0,20}", re.ASCII)

DEVICE_RANGES: FrozenSet[str] = frozenset({"", "1-10", "11-50", "51-100", "100+"})

MAX_LENGTHS: Dict[str, int] = {
    "first_name": 100,
    "last_name": 100,
    "email": 254,
    "company": 200,
    "phone": 20,
    "devices": 20,
    "message": 2000,
}

REQUIRED_FIELDS = ("first_name", "last_name", "email", "company")

# Inbound form names -> submission attribute names
FORM_FIELD_ALIASES: Dict[str, str] = {
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "company": "company",
    "phone": "phone",
    "devices": "devices",
    "message": "message",
}


@dataclass(frozen=True)
class Submission:
    first_name: str
    last_name: str
    email: str
    company: str
    phone: str = ""
    devices: str = ""
    message: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


def fields_from_form(form: Mapping[str, Optional[str]]) -> Dict[str, str]:
    """
    Map raw form names onto submission field names.

    Accepts the split ``firstName``/``lastName`` form and the older single
    ``name`` field, which is split on the first run of whitespace.
    """
    fields: Dict[str, str] = {}
    for form_name, field_name in FORM_FIELD_ALIASES.items():
        value = form.get(form_name)
        if value is None:
            value = form.get(field_name)
        fields[field_name] = value or ""

    combined = form.get("name")
    if combined and not fields["first_name"] and not fields["last_name"]:
        parts = combined.strip().split(None, 1)
        if parts:
            fields["first_name"] = parts[0]
            fields["last_name"] = parts[1] if len(parts) > 1 else ""

    return fields


def validate_email(email: str) -> bool:
    if len(email) > MAX_LENGTHS["email"]:
        return False
    return bool(_EMAIL_PATTERN.fullmatch(email))


def validate_phone(phone: str) -> bool:
    """Empty phone is allowed; anything else must be digits, spaces, + - ( )."""
    if not phone:
        return True
    return bool(_PHONE_PATTERN.fullmatch(phone))


def validate_device_range(devices: str) -> bool:
    return devices in DEVICE_RANGES


def sanitize_and_validate(raw_fields: Mapping[str, Optional[str]]) -> Submission:
    """
    Trim, normalise and validate raw submission fields.

    Raises a ``SubmissionValidationError`` subclass for the first failing
    rule; nothing is returned for a partially valid submission.
    """
    cleaned = {name: (raw_fields.get(name) or "").strip() for name in MAX_LENGTHS}
    cleaned["email"] = cleaned["email"].lower()

    for name in REQUIRED_FIELDS:
        if not cleaned[name]:
            raise MissingField(f"{name} is required", field=name)

    for name, max_length in MAX_LENGTHS.items():
        if len(cleaned[name]) > max_length:
            raise FieldTooLong(f"{name} must be at most {max_length} characters", field=name)

    if not validate_email(cleaned["email"]):
        raise InvalidEmail("invalid email format", field="email")

    if not validate_phone(cleaned["phone"]):
        raise InvalidPhone("invalid phone number format", field="phone")

    if not validate_device_range(cleaned["devices"]):
        raise InvalidDeviceRange("invalid device range selection", field="devices")

    return Submission(**cleaned)
