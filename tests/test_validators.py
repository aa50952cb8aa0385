"""Tests for the email address policy."""

from __future__ import annotations

import pytest

from notifier.application.dispatch.validators import EmailAddressPolicy, email_domain
from notifier.config import DEFAULT_DISALLOWED_EMAIL_DOMAIN_FRAGMENTS, DEFAULT_DISALLOWED_EMAIL_DOMAINS
from notifier.domain.entities import (
    SKIP_DISALLOWED_DOMAIN,
    SKIP_INVALID_ADDRESS,
    SKIP_MISSING_ADDRESS,
)


@pytest.fixture()
def policy() -> EmailAddressPolicy:
    return EmailAddressPolicy(
        DEFAULT_DISALLOWED_EMAIL_DOMAINS, DEFAULT_DISALLOWED_EMAIL_DOMAIN_FRAGMENTS
    )


def test_email_domain_is_lower_cased() -> None:
    assert email_domain(" Person@Mail.Company.COM ") == "mail.company.com"
    assert email_domain("no-at-sign") == ""


@pytest.mark.parametrize("address", [None, "", "   "])
def test_missing_address(policy: EmailAddressPolicy, address) -> None:
    assert policy.rejection_reason(address) == SKIP_MISSING_ADDRESS


@pytest.mark.parametrize(
    "address",
    [
        "user@example.com",
        "user@EXAMPLE.ORG",
        "user@localhost.com",
        "user@invalid.com",
        "user@mail.example.co.uk",
        "user@latest-news.io",
    ],
)
def test_reserved_domains_are_disallowed(policy: EmailAddressPolicy, address: str) -> None:
    """Exact reserved domains and domains containing a blocked fragment are skipped."""

    assert policy.rejection_reason(address) == SKIP_DISALLOWED_DOMAIN


def test_domain_check_runs_before_syntax_check(policy: EmailAddressPolicy) -> None:
    assert policy.rejection_reason("not valid@example.com") == SKIP_DISALLOWED_DOMAIN


@pytest.mark.parametrize("address", ["plainaddress", "two@@company.com", "user@"])
def test_invalid_syntax(policy: EmailAddressPolicy, address: str) -> None:
    assert policy.rejection_reason(address) == SKIP_INVALID_ADDRESS


def test_valid_address_is_allowed(policy: EmailAddressPolicy) -> None:
    assert policy.rejection_reason("reader@company.com") is None
    assert policy.allows("  reader@company.com ")


def test_custom_policy_without_fragments() -> None:
    policy = EmailAddressPolicy(["blocked.org"])

    assert policy.allows("someone@testing.dev")
    assert not policy.allows("someone@blocked.org")
