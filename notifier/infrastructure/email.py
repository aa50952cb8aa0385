"""Mail transport used to deliver document notifications via SendGrid."""

from __future__ import annotations

import html
import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from notifier.config import Settings
from notifier.domain.exceptions import MailDeliveryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MailMessage:
    """Rendered email ready to be handed to a transport."""

    subject: str
    html_content: str
    summary: str = ""


class MailTransport(Protocol):
    def send_mail(self, address: str, message: MailMessage) -> str | None:
        """Deliver ``message`` to ``address`` and return the provider id, if any.

        Raises :class:`MailDeliveryError` when the provider rejects the message.
        """


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages: list[str] = []
            for item in errors:
                if not isinstance(item, dict):
                    continue
                message = item.get("message")
                field = item.get("field")
                if message and field:
                    messages.append(f"{message} (field: {field})")
                elif message:
                    messages.append(str(message))
            if messages:
                return "; ".join(messages)
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        return "; ".join(str(item) for item in parsed)

    return None


def _describe_sendgrid_failure(status_code: Any, body: Any) -> str:
    details = _extract_sendgrid_error_details(body)
    if status_code and details:
        return f"SendGrid API request failed with status {status_code}: {details}"
    if status_code:
        return f"SendGrid API request failed with status {status_code}"
    if details:
        return f"SendGrid API request failed: {details}"
    return "SendGrid API request failed"


def _response_message_id(response: Any) -> str | None:
    headers = getattr(response, "headers", None)
    if not headers:
        return None
    try:
        message_id = headers.get("X-Message-Id")
    except AttributeError:
        return None
    return str(message_id) if message_id else None


class SendGridMailTransport:
    """Send rendered messages through the SendGrid v3 REST API."""

    def __init__(self, api_key: str | None, sender: str | None) -> None:
        self._api_key = api_key
        self._sender = sender

    @classmethod
    def from_settings(cls, settings: Settings) -> "SendGridMailTransport":
        return cls(settings.sendgrid_api_key, settings.sendgrid_sender)

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key and self._sender)

    def send_mail(self, address: str, message: MailMessage) -> str | None:
        if not self.is_configured:
            raise MailDeliveryError("SendGrid configuration incomplete; email delivery disabled")

        mail = Mail(
            from_email=self._sender,
            to_emails=address,
            subject=message.subject,
            html_content=message.html_content,
        )

        try:
            client = SendGridAPIClient(self._api_key)
            response = client.send(mail)
        except Exception as exc:  # pragma: no cover - network failures depend on environment
            status_code = getattr(exc, "status_code", None)
            description = _describe_sendgrid_failure(status_code, getattr(exc, "body", None))
            if not status_code:
                description = f"{description} ({exc})"
            raise MailDeliveryError(description, status_code=status_code) from exc

        status_code = getattr(response, "status_code", None)
        if not isinstance(status_code, int) or not 200 <= status_code < 300:
            raise MailDeliveryError(
                _describe_sendgrid_failure(status_code, getattr(response, "body", None)),
                status_code=status_code if isinstance(status_code, int) else None,
            )

        return _response_message_id(response)


def render_document_published_email(*, title: str, body: str, link: str) -> MailMessage:
    """Build the email announcing that a document was published."""

    subject = f"New document published: {title}"
    paragraphs = [
        f"<p>{html.escape(line)}</p>" for line in body.splitlines() if line.strip()
    ]
    html_content = "".join(
        (
            "<p>Hello,</p>",
            f"<p>A new document has been published: <strong>{html.escape(title)}</strong></p>",
            *paragraphs,
            f'<p><a href="{html.escape(link, quote=True)}">Read it online</a></p>',
        )
    )
    return MailMessage(subject=subject, html_content=html_content)


def render_document_updated_email(*, title: str, body: str, link: str) -> MailMessage:
    """Build the email announcing that a published document changed."""

    message = render_document_published_email(title=title, body=body, link=link)
    return MailMessage(
        subject=f"Document updated: {title}",
        html_content=message.html_content.replace(
            "A new document has been published", "A published document was updated", 1
        ),
    )


__all__ = [
    "MailMessage",
    "MailTransport",
    "SendGridMailTransport",
    "render_document_published_email",
    "render_document_updated_email",
]
