# marketing_site/services/email_transport.py
from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

import httpx

from marketing_site.core.config import Settings
from marketing_site.core.exceptions import TransportRejected, TransportUnconfigured
from marketing_site.core.logging import get_structlog_logger
from marketing_site.services.email_composer import EmailAddress, EmailMessage

logger = get_structlog_logger(__name__)

SENDGRID_API_URL = "https://api.sendgrid.com/v3/mail/send"


class EmailTransport(Protocol):
    """Anything that can deliver a composed message, raising EmailTransportError on failure."""

    def send(self, message: EmailMessage) -> None:
        ...


def _address(address: EmailAddress) -> Dict[str, str]:
    payload = {"email": address.email}
    if address.name:
        payload["name"] = address.name
    return payload


def build_sendgrid_payload(message: EmailMessage) -> Dict[str, Any]:
    """Format a message as a SendGrid v3 mail/send request body."""
    payload: Dict[str, Any] = {
        "personalizations": [{"to": [_address(message.to_address)]}],
        "from": _address(message.from_address),
        "subject": message.subject,
        # SendGrid requires text/plain before text/html
        "content": [
            {"type": "text/plain", "value": message.text_body},
            {"type": "text/html", "value": message.html_body},
        ],
    }
    if message.reply_to:
        payload["reply_to"] = _address(message.reply_to)
    return payload


class SendGridTransport:
    """
    Synchronous SendGrid v3 client.

    Blocking by design: callers run on a worker thread. The request is
    bounded by ``timeout`` and a timeout counts as a rejected send.
    """

    def __init__(
        self,
        api_key: Optional[str],
        *,
        api_url: str = SENDGRID_API_URL,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings, client: Optional[httpx.Client] = None) -> "SendGridTransport":
        return cls(
            settings.sendgrid_api_key,
            api_url=settings.sendgrid_api_url,
            timeout=settings.sendgrid_timeout_seconds,
            client=client,
        )

    def send(self, message: EmailMessage) -> None:
        if not self.api_key:
            raise TransportUnconfigured()

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = build_sendgrid_payload(message)

        try:
            if self._client is not None:
                response = self._client.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.post(self.api_url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            raise TransportRejected(f"sendgrid request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise TransportRejected(f"sendgrid request failed: {str(e)[:200]}") from e

        if response.status_code >= 400:
            body = response.text[:500]
            raise TransportRejected(
                f"sendgrid returned status {response.status_code}",
                provider_status=response.status_code,
                provider_body=body,
            )

        logger.info(
            "email.sent",
            provider="sendgrid",
            status_code=response.status_code,
            message_id=response.headers.get("X-Message-Id"),
        )
