# marketing_site/services/email_composer.py
from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Optional

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape

from marketing_site.services.validation import Submission

_templates = Environment(
    loader=PackageLoader("marketing_site", "templates"),
    autoescape=select_autoescape(enabled_extensions=("html",), default_for_string=False),
    undefined=StrictUndefined,
    keep_trailing_newline=False,
)


@dataclass(frozen=True)
class EmailAddress:
    email: str
    name: Optional[str] = None


@dataclass(frozen=True)
class EmailMessage:
    subject: str
    html_body: str
    text_body: str
    from_address: EmailAddress
    to_address: EmailAddress
    reply_to: Optional[EmailAddress] = None


def notification_subject(submission: Submission) -> str:
    return "New Demo Request from {} {} - {}".format(
        html.escape(submission.first_name),
        html.escape(submission.last_name),
        html.escape(submission.company),
    )


def compose_notification(
    submission: Submission,
    *,
    sender: EmailAddress,
    recipient: EmailAddress,
    site_name: str = "RobusTest",
) -> EmailMessage:
    """
    Build the owner notification for a validated submission.

    User values are escaped in the HTML body and raw in the text body.
    Replies go straight to the submitter.
    """
    context = {"submission": submission, "site_name": site_name}
    return EmailMessage(
        subject=notification_subject(submission),
        html_body=_templates.get_template("email/notification.html").render(context),
        text_body=_templates.get_template("email/notification.txt").render(context),
        from_address=sender,
        to_address=recipient,
        reply_to=EmailAddress(submission.email, submission.full_name),
    )


def compose_confirmation(
    submission: Submission,
    *,
    sender: EmailAddress,
    reply_to: Optional[EmailAddress] = None,
    site_name: str = "RobusTest",
) -> EmailMessage:
    """Build the thank-you email sent back to the submitter."""
    context = {"submission": submission, "site_name": site_name}
    return EmailMessage(
        subject=f"Thanks for your interest in {site_name}",
        html_body=_templates.get_template("email/confirmation.html").render(context),
        text_body=_templates.get_template("email/confirmation.txt").render(context),
        from_address=sender,
        to_address=EmailAddress(submission.email, submission.full_name),
        reply_to=reply_to,
    )
