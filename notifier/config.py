"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"

DEFAULT_DISALLOWED_EMAIL_DOMAINS = (
    "example.com",
    "example.net",
    "example.org",
    "test.com",
    "localhost.com",
    "invalid.com",
)
DEFAULT_DISALLOWED_EMAIL_DOMAIN_FRAGMENTS = ("example", "test")


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    app_timezone: str | None = Field(
        default=None,
        description="IANA timezone name used to read timestamps that carry no offset",
    )
    app_base_url: str = Field(
        default="http://localhost:8000",
        description="Public base URL used to build document deep links",
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending transactional emails via the REST API",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of transactional messages",
        min_length=3,
    )
    mail_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Upper bound for a single mail send"
    )

    push_gateway_url: str | None = Field(
        default=None,
        description="HTTP endpoint of the push delivery gateway",
    )
    push_api_key: str | None = Field(
        default=None, description="Bearer key sent to the push delivery gateway"
    )
    push_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Upper bound for a single push send"
    )
    push_cooldown_seconds: int = Field(
        default=15,
        gt=0,
        description="Minimum number of seconds between two pushes to the same recipient",
    )
    push_concurrency: int = Field(
        default=8, gt=0, description="Concurrent push sends within one dispatch"
    )

    email_batch_size: int = Field(
        default=10, gt=0, description="Number of recipients processed per email batch"
    )
    disallowed_email_domains: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DISALLOWED_EMAIL_DOMAINS),
        description="Email domains that never receive notifications",
    )
    disallowed_email_domain_fragments: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DISALLOWED_EMAIL_DOMAIN_FRAGMENTS),
        description="Substrings that disqualify an email domain",
    )

    dispatch_max_attempts: int = Field(
        default=3, gt=0, description="Attempts allowed for a dispatch before it fails"
    )
    dispatch_backoff_seconds: list[int] = Field(
        default_factory=lambda: [10, 60, 120],
        min_length=1,
        description="Delay before each dispatch retry",
    )
    dispatch_workers: int = Field(
        default=4, gt=0, description="Worker threads processing dispatch requests"
    )

    audit_body_limit: int = Field(
        default=100, gt=0, description="Maximum body length stored in delivery attempts"
    )
    audit_token_prefix: int = Field(
        default=15, gt=0, description="Number of token characters kept in delivery attempts"
    )

    renotify_on_content_update: bool = Field(
        default=False,
        description="Notify again when the content of a published document changes",
    )

    @field_validator("app_timezone")
    @classmethod
    def _validate_app_timezone(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        try:
            ZoneInfo(value.strip())
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown APP_TIMEZONE {value!r}") from exc
        return value.strip()

    @model_validator(mode="after")
    def _validate_sendgrid_pair(self) -> "Settings":
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        return self

    def backoff_for_attempt(self, attempt: int) -> int:
        """Return the retry delay that follows the failed ``attempt`` (1-based)."""

        index = min(max(attempt, 1), len(self.dispatch_backoff_seconds)) - 1
        return self.dispatch_backoff_seconds[index]


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
