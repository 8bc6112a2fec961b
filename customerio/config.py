"""Dataclass-based configuration for the Customer.io client and trigger.

Each section is a frozen dataclass with sensible defaults, overridable from
environment variables::

    config = ClientConfig.from_env()
    async with CustomerIoClient(credentials, config=config) as client:
        ...
"""

import os
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from customerio.constants import DEFAULT_PAGE_SIZE
from customerio.errors import ConfigurationError


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_number(name: str, value: str, cast: Callable[[str], Any]) -> Any:
    try:
        return cast(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from exc


@dataclass(frozen=True)
class ClientConfig:
    """Outbound HTTP settings."""

    timeout: float = 30.0  # seconds
    page_size: int = DEFAULT_PAGE_SIZE
    user_agent: str = "customerio-integration/0.1.0"

    @classmethod
    def default(cls) -> "ClientConfig":
        return cls()

    @classmethod
    def from_env(cls, prefix: str = "CUSTOMERIO_") -> "ClientConfig":
        """Create config from environment variables.

        Example: CUSTOMERIO_TIMEOUT=10 CUSTOMERIO_PAGE_SIZE=250
        """
        overrides = {}
        timeout = os.getenv(f"{prefix}TIMEOUT")
        if timeout:
            overrides["timeout"] = _env_number(f"{prefix}TIMEOUT", timeout, float)
        page_size = os.getenv(f"{prefix}PAGE_SIZE")
        if page_size:
            overrides["page_size"] = _env_number(f"{prefix}PAGE_SIZE", page_size, int)
        return cls(**overrides)


@dataclass(frozen=True)
class WebhookConfig:
    """Reporting-webhook trigger settings.

    ``events`` empty means every event is processed. ``signing_key`` falls
    back to the Track API key when not set.
    """

    events: tuple[str, ...] = field(default_factory=tuple)
    validate_signature: bool = True
    signing_key: Optional[str] = None

    @classmethod
    def default(cls) -> "WebhookConfig":
        return cls()

    @classmethod
    def from_env(cls, prefix: str = "CUSTOMERIO_") -> "WebhookConfig":
        """Create config from environment variables.

        Example: CUSTOMERIO_WEBHOOK_EVENTS=email_opened,email_clicked
        """
        overrides = {}
        events = os.getenv(f"{prefix}WEBHOOK_EVENTS")
        if events:
            overrides["events"] = tuple(e.strip() for e in events.split(",") if e.strip())
        validate = os.getenv(f"{prefix}VALIDATE_SIGNATURE")
        if validate:
            overrides["validate_signature"] = _env_bool(validate)
        signing_key = os.getenv(f"{prefix}WEBHOOK_SIGNING_KEY")
        if signing_key:
            overrides["signing_key"] = signing_key
        return cls(**overrides)

    def to_parameters(self) -> dict:
        """Render as trigger node parameters."""
        options = {"validate_signature": self.validate_signature}
        if self.signing_key:
            options["webhook_signing_key"] = self.signing_key
        return {"events": list(self.events), "options": options}
