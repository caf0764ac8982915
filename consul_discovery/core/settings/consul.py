"""Consul service discovery configuration settings.

Environment variables use CONSUL_ prefix.
Example: CONSUL_ENABLED=true, CONSUL_ADDRESS=orders.internal

The option names of the original integration (``pingEnabled``,
``pingEndpoint``, ``pingInterval``, ``removeAfterInterval``) are accepted
alongside the snake_case field names in init kwargs and YAML files.
"""

from __future__ import annotations

import json
from typing import Annotated, Any

from pydantic import Field, SecretStr, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .yaml_sources import create_consul_yaml_source

DEFAULT_AGENT_URL = "http://127.0.0.1:8500"
DEFAULT_PING_INTERVAL = 5
DEFAULT_REMOVE_AFTER_INTERVAL = 10

_OPTION_ALIASES = {
    "pingEnabled": "ping_enabled",
    "pingEndpoint": "ping_endpoint",
    "pingInterval": "ping_interval",
    "removeAfterInterval": "remove_after_interval",
    "connectTimeout": "connect_timeout",
}


def parse_enabled_flag(value: str) -> bool:
    """Interpret an enable flag string.

    ``"true"`` and ``"1"`` (case-insensitive) are true; every other value,
    including one padded with whitespace, is false.
    """
    return value.lower() in ("true", "1")


class ConsulSettings(BaseSettings):
    """Consul service discovery settings.

    Environment variables use CONSUL_ prefix.
    Example: CONSUL_ENABLED=true

    Registration is built from these settings at startup; see
    ``consul_discovery.infra.discovery.registration.build_registration``.
    """

    # ──────────────────────────────────────────────────────────────
    # Enable/Disable toggle
    # ──────────────────────────────────────────────────────────────

    enabled: bool = Field(
        default=False,
        description="Enable Consul service registration (disabled by default)",
    )

    # ──────────────────────────────────────────────────────────────
    # Service registration
    # ──────────────────────────────────────────────────────────────

    service: str = Field(
        default="consul-discovery",
        min_length=1,
        description="Service name announced to the Consul agent",
    )

    address: str = Field(
        default="",
        description="Address to advertise; may carry an http:// or https:// prefix",
    )

    port: int = Field(
        default=0,
        ge=0,
        le=65535,
        description="Port to advertise (0 omits the port from the health check URL)",
    )

    tags: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Service tags for filtering and routing",
    )

    # ──────────────────────────────────────────────────────────────
    # Consul agent connection
    # ──────────────────────────────────────────────────────────────

    url: str | None = Field(
        default=None,
        description="Consul agent HTTP API URL (defaults to the local agent)",
    )

    token: SecretStr | None = Field(
        default=None,
        description="Consul ACL token for authentication",
    )

    connect_timeout: float = Field(
        default=5.0,
        ge=0.5,
        le=30.0,
        description="HTTP timeout in seconds for agent calls",
    )

    resolve_services: bool = Field(
        default=True,
        description="Resolve service name hosts through the agent in the shared query client",
    )

    # ──────────────────────────────────────────────────────────────
    # Liveness check (Consul pulls from the app)
    # ──────────────────────────────────────────────────────────────

    ping_enabled: bool = Field(
        default=False,
        description="Expose the ping endpoint and register an HTTP check for it",
    )

    ping_endpoint: str = Field(
        default="ping",
        description="Path of the liveness endpoint, relative to the service root",
    )

    ping_interval: int = Field(
        default=DEFAULT_PING_INTERVAL,
        description="Seconds between agent checks (values <= 0 fall back to 5)",
    )

    remove_after_interval: int = Field(
        default=DEFAULT_REMOVE_AFTER_INTERVAL,
        description="Seconds a critical instance stays registered (values <= 0 fall back to 10)",
    )

    # ──────────────────────────────────────────────────────────────
    # Validators
    # ──────────────────────────────────────────────────────────────

    @model_validator(mode="before")
    @classmethod
    def _accept_option_aliases(cls, data: Any) -> Any:
        """Map camelCase option names onto field names."""
        if isinstance(data, dict):
            return {_OPTION_ALIASES.get(key, key): value for key, value in data.items()}
        return data

    @field_validator("enabled", "ping_enabled", mode="before")
    @classmethod
    def _parse_flag(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_enabled_flag(value)
        return value

    @field_validator("url", mode="before")
    @classmethod
    def _empty_url_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("ping_endpoint", mode="after")
    @classmethod
    def _strip_leading_slash(cls, value: str) -> str:
        return value.strip().lstrip("/")

    @field_validator("tags", mode="before")
    @classmethod
    def _parse_tags(cls, value: Any) -> list[str]:
        """Parse tags from JSON string or comma-separated list."""
        if isinstance(value, str):
            if value.startswith("["):
                return json.loads(value)
            return [t.strip() for t in value.split(",") if t.strip()]
        return value if value else []

    # ──────────────────────────────────────────────────────────────
    # Computed properties
    # ──────────────────────────────────────────────────────────────

    @computed_field
    @property
    def agent_url(self) -> str:
        """Consul agent base URL without trailing slash."""
        return (self.url or DEFAULT_AGENT_URL).rstrip("/")

    @property
    def effective_ping_interval(self) -> int:
        return self.ping_interval if self.ping_interval > 0 else DEFAULT_PING_INTERVAL

    @property
    def effective_remove_after_interval(self) -> int:
        if self.remove_after_interval > 0:
            return self.remove_after_interval
        return DEFAULT_REMOVE_AFTER_INTERVAL

    def get_auth_headers(self) -> dict[str, str]:
        """Get HTTP headers for Consul API authentication.

        Returns:
            Dictionary with X-Consul-Token header if token is set.
        """
        if self.token:
            return {"X-Consul-Token": self.token.get_secret_value()}
        return {}

    # ──────────────────────────────────────────────────────────────
    # Model configuration
    # ──────────────────────────────────────────────────────────────

    model_config = SettingsConfigDict(
        env_prefix="CONSUL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        """Customize settings source precedence: init > yaml > env > dotenv > secrets."""
        return (
            init_settings,
            create_consul_yaml_source(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )
