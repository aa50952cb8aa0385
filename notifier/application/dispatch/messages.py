"""Build the notification content sent for a dispatch request."""

from __future__ import annotations

import re
from dataclasses import replace

from notifier.domain.entities import (
    NOTIFICATION_BROADCAST,
    NOTIFICATION_DOCUMENT_PUBLISHED,
    NOTIFICATION_DOCUMENT_UPDATED,
    NOTIFICATION_TEST,
    TRIGGER_CONTENT_UPDATED,
    DispatchRequest,
)
from notifier.infrastructure.email import (
    MailMessage,
    render_document_published_email,
    render_document_updated_email,
)
from notifier.infrastructure.push import PushMessage

PUSH_BODY_LIMIT = 150
_TAG_PATTERN = re.compile(r"<[^>]+>")
_SPACE_PATTERN = re.compile(r"\s+")


def document_link(base_url: str, document_id: int) -> str:
    return f"{base_url.rstrip('/')}/documents/{document_id}"


def notification_type_for(request: DispatchRequest) -> str:
    if request.trigger == TRIGGER_CONTENT_UPDATED:
        return NOTIFICATION_DOCUMENT_UPDATED
    return NOTIFICATION_DOCUMENT_PUBLISHED


def excerpt(body: str, limit: int = PUSH_BODY_LIMIT) -> str:
    """Return ``body`` without markup, shortened to ``limit`` characters."""

    text = _SPACE_PATTERN.sub(" ", _TAG_PATTERN.sub(" ", body)).strip()
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."


def build_push_message(request: DispatchRequest, *, base_url: str) -> PushMessage:
    notification_type = notification_type_for(request)
    prefix = "Updated" if notification_type == NOTIFICATION_DOCUMENT_UPDATED else "New document"
    data = {
        "document_id": str(request.document_id),
        "notification_type": notification_type,
    }
    if request.published_at is not None:
        data["published_at"] = request.published_at.isoformat()
    return PushMessage(
        title=f"{prefix}: {request.title}",
        body=excerpt(request.body),
        link=document_link(base_url, request.document_id),
        data=data,
    )


def build_test_push_message(*, base_url: str) -> PushMessage:
    return PushMessage(
        title="Test notification",
        body="This is a test notification from the publish notifier",
        link=base_url.rstrip("/") + "/",
        data={"notification_type": NOTIFICATION_TEST},
    )


def build_broadcast_push_message(
    title: str, body: str, *, base_url: str, data: dict[str, str] | None = None
) -> PushMessage:
    """Free-form announcement; caller data never overrides the notification type."""

    return PushMessage(
        title=title,
        body=excerpt(body),
        link=base_url.rstrip("/") + "/",
        data={**(data or {}), "notification_type": NOTIFICATION_BROADCAST},
    )


def build_mail_message(request: DispatchRequest, *, base_url: str) -> MailMessage:
    link = document_link(base_url, request.document_id)
    if notification_type_for(request) == NOTIFICATION_DOCUMENT_UPDATED:
        message = render_document_updated_email(title=request.title, body=request.body, link=link)
    else:
        message = render_document_published_email(
            title=request.title, body=request.body, link=link
        )
    return replace(message, summary=excerpt(request.body))


__all__ = [
    "PUSH_BODY_LIMIT",
    "build_broadcast_push_message",
    "build_mail_message",
    "build_push_message",
    "build_test_push_message",
    "document_link",
    "excerpt",
    "notification_type_for",
]
