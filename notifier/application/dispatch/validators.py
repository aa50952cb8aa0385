"""Address checks shared by recipient resolution and the email channel."""

from __future__ import annotations

import re
from collections.abc import Iterable

from email_validator import EmailNotValidError, validate_email

from notifier.domain.entities import (
    SKIP_DISALLOWED_DOMAIN,
    SKIP_INVALID_ADDRESS,
    SKIP_MISSING_ADDRESS,
)


PUSH_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9:_-]{150,300}$")


def email_domain(address: str) -> str:
    """Return the lower-cased part after the first ``@`` (empty if absent)."""

    _, _, domain = address.strip().partition("@")
    return domain.lower()


class EmailAddressPolicy:
    """Decide whether an address may receive notifications.

    A domain is disallowed when it equals one of ``blocked_domains`` or
    contains any of ``blocked_fragments``.
    """

    def __init__(
        self,
        blocked_domains: Iterable[str],
        blocked_fragments: Iterable[str] = (),
    ) -> None:
        self._blocked_domains = frozenset(domain.strip().lower() for domain in blocked_domains)
        self._blocked_fragments = tuple(
            fragment.strip().lower() for fragment in blocked_fragments if fragment.strip()
        )

    def is_disallowed_domain(self, domain: str) -> bool:
        domain = domain.strip().lower()
        if domain in self._blocked_domains:
            return True
        return any(fragment in domain for fragment in self._blocked_fragments)

    def rejection_reason(self, address: str | None) -> str | None:
        """Return why ``address`` must be skipped, or ``None`` when it is usable."""

        if address is None or not address.strip():
            return SKIP_MISSING_ADDRESS

        if self.is_disallowed_domain(email_domain(address)):
            return SKIP_DISALLOWED_DOMAIN

        try:
            validate_email(address.strip(), check_deliverability=False)
        except EmailNotValidError:
            return SKIP_INVALID_ADDRESS
        return None

    def allows(self, address: str | None) -> bool:
        return self.rejection_reason(address) is None


def is_well_formed_push_token(token: str | None) -> bool:
    """Return ``True`` when ``token`` looks like a device registration token.

    Only the shape is checked; the gateway remains the authority on whether
    the token is still registered.
    """

    return bool(token) and PUSH_TOKEN_PATTERN.fullmatch(token.strip()) is not None


__all__ = [
    "EmailAddressPolicy",
    "PUSH_TOKEN_PATTERN",
    "email_domain",
    "is_well_formed_push_token",
]
