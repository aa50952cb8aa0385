"""Push transport bindings.

The concrete provider sits behind an HTTP gateway; this module only knows
how to hand a provider-agnostic payload to it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx

from notifier.config import Settings
from notifier.domain.exceptions import PushDeliveryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PushMessage:
    """Provider agnostic notification payload."""

    title: str
    body: str
    link: str
    data: dict[str, str] = field(default_factory=dict)

    def as_payload(self, token: str) -> dict[str, Any]:
        return {
            "token": token,
            "notification": {"title": self.title, "body": self.body},
            "link": self.link,
            "data": dict(self.data),
        }


class PushTransport(Protocol):
    def send_push(self, token: str, message: PushMessage) -> str:
        """Deliver ``message`` to the device ``token`` and return the message id.

        Raises :class:`PushDeliveryError` when the message cannot be delivered.
        """


class HttpPushTransport:
    """Deliver push messages by posting JSON to the configured gateway."""

    def __init__(
        self,
        url: str,
        *,
        api_key: str | None = None,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._url = url
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = client or httpx.Client(timeout=timeout, headers=headers)

    def send_push(self, token: str, message: PushMessage) -> str:
        try:
            response = self._client.post(self._url, json=message.as_payload(token))
        except httpx.TimeoutException as exc:
            raise PushDeliveryError(f"Push gateway timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise PushDeliveryError(f"Push gateway request failed: {exc}") from exc

        if response.status_code >= 400:
            raise PushDeliveryError(
                _describe_error(response), status_code=response.status_code
            )

        message_id = _extract_message_id(response)
        if not message_id:
            raise PushDeliveryError(
                "Push gateway response did not include a message id",
                status_code=response.status_code,
            )
        return message_id

    def close(self) -> None:
        self._client.close()


class NullPushTransport:
    """Transport used when no push gateway is configured; every send fails."""

    def send_push(self, token: str, message: PushMessage) -> str:
        raise PushDeliveryError("Push gateway not configured")

    def close(self) -> None:
        return None


def build_push_transport(settings: Settings) -> HttpPushTransport | NullPushTransport:
    """Return the transport matching ``settings``."""

    if not settings.push_gateway_url:
        logger.warning("PUSH_GATEWAY_URL is not set; push notifications will fail")
        return NullPushTransport()
    return HttpPushTransport(
        settings.push_gateway_url,
        api_key=settings.push_api_key,
        timeout=settings.push_timeout_seconds,
    )


def _extract_message_id(response: httpx.Response) -> str | None:
    try:
        payload = response.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    for key in ("message_id", "name", "id"):
        value = payload.get(key)
        if value:
            return str(value)
    return None


def _describe_error(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None

    detail: Any = None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            detail = error.get("message") or error.get("status")
        else:
            detail = error or payload.get("message")
    if not detail:
        detail = response.text.strip() or None

    if detail:
        return f"Push gateway responded with status {response.status_code}: {detail}"
    return f"Push gateway responded with status {response.status_code}"


__all__ = [
    "PushMessage",
    "PushTransport",
    "HttpPushTransport",
    "NullPushTransport",
    "build_push_transport",
]
