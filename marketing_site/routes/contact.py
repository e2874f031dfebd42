# marketing_site/routes/contact.py
from __future__ import annotations

import ipaddress
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse

from marketing_site.core.config import settings
from marketing_site.services.response_renderer import render_outcome
from marketing_site.services.submission import SubmissionPipeline
from marketing_site.services.validation import fields_from_form

router = APIRouter()


def get_client_ip(request: Request) -> str:
    """Client identifier used as the rate-limit key."""
    peer = request.client.host if request.client else "unknown"
    if not settings.trust_forwarded_for:
        return peer

    forwarded_for = request.headers.get("X-Forwarded-For")
    if not forwarded_for:
        return peer

    # First hop is the original client
    try:
        return str(ipaddress.ip_address(forwarded_for.split(",")[0].strip()))
    except ValueError:
        return peer


def get_pipeline(request: Request) -> SubmissionPipeline:
    return request.app.state.contact_pipeline


# Plain `def` so the blocking email send runs on the threadpool
@router.post(
    "/contact",
    response_class=HTMLResponse,
    summary="Submit the contact / demo request form",
)
def submit_contact_form(
    request: Request,
    first_name: Optional[str] = Form(default=None, alias="firstName"),
    last_name: Optional[str] = Form(default=None, alias="lastName"),
    name: Optional[str] = Form(default=None),
    email: Optional[str] = Form(default=None),
    company: Optional[str] = Form(default=None),
    phone: Optional[str] = Form(default=None),
    devices: Optional[str] = Form(default=None),
    message: Optional[str] = Form(default=None),
    pipeline: SubmissionPipeline = Depends(get_pipeline),
) -> HTMLResponse:
    raw_fields = fields_from_form(
        {
            "firstName": first_name,
            "lastName": last_name,
            "name": name,
            "email": email,
            "company": company,
            "phone": phone,
            "devices": devices,
            "message": message,
        }
    )
    outcome = pipeline.submit(get_client_ip(request), raw_fields)
    return render_outcome(outcome)
