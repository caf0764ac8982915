"""Agent registration built from Consul settings.

``build_registration`` is pure apart from the random instance ID: the
``CONSUL_ENABLED`` environment variable is passed in by the caller as
``enabled_override`` instead of being read here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from consul_discovery.core.exceptions import ConfigurationError
from consul_discovery.core.settings.consul import parse_enabled_flag

if TYPE_CHECKING:
    from consul_discovery.core.settings.consul import ConsulSettings

ENABLED_ENV_VAR = "CONSUL_ENABLED"


@dataclass(frozen=True)
class HealthCheck:
    """HTTP check the agent runs against the service's ping endpoint."""

    http: str
    interval: int
    deregister_critical_after: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "HTTP": self.http,
            "Interval": f"{self.interval}s",
            "DeregisterCriticalServiceAfter": f"{self.deregister_critical_after}s",
        }


@dataclass(frozen=True)
class ServiceRegistration:
    """Descriptor announcing this instance to the Consul agent.

    Attributes:
        id: Unique instance ID, ``"{name}:{random hex}"``.
        name: Logical service name.
        address: Advertised address.
        port: Advertised port (0 when not set).
        tags: Service tags.
        check: HTTP health check, present only when pinging is enabled.
    """

    id: str
    name: str
    address: str
    port: int
    tags: tuple[str, ...] = ()
    check: HealthCheck | None = None

    def to_payload(self) -> dict[str, Any]:
        """Render the body of ``PUT /v1/agent/service/register``."""
        payload: dict[str, Any] = {
            "ID": self.id,
            "Name": self.name,
            "Address": self.address,
            "Port": self.port,
        }
        if self.tags:
            payload["Tags"] = list(self.tags)
        if self.check is not None:
            payload["Checks"] = [self.check.to_payload()]
        return payload


def build_health_check_url(address: str, port: int, endpoint: str) -> str:
    """Build the URL the agent polls for liveness.

    ``http://`` is prepended unless the address already starts with
    ``http`` (case-insensitive); the port segment is omitted when port is 0.

    Example:
        >>> build_health_check_url("myhost", 8080, "health")
        'http://myhost:8080/health'
        >>> build_health_check_url("https://myhost", 0, "health")
        'https://myhost/health'
    """
    scheme = "" if address.lower().startswith("http") else "http://"
    port_segment = f":{port}" if port > 0 else ""
    return f"{scheme}{address}{port_segment}/{endpoint}"


def resolve_enabled(settings: ConsulSettings, enabled_override: str | None = None) -> bool:
    """Combine the configured flag with the environment override.

    A non-blank override wins: ``"true"``/``"1"`` enable, anything else disables.
    """
    if enabled_override is not None and enabled_override.strip():
        return parse_enabled_flag(enabled_override)
    return settings.enabled


def build_registration(
    settings: ConsulSettings,
    enabled_override: str | None = None,
) -> ServiceRegistration | None:
    """Build the agent registration for this process.

    Args:
        settings: Consul settings.
        enabled_override: Raw value of ``CONSUL_ENABLED``, if any.

    Returns:
        A new registration with a fresh ID, or None when discovery is disabled.

    Raises:
        ConfigurationError: If discovery is enabled but no address is configured.
    """
    if not resolve_enabled(settings, enabled_override):
        return None

    if not settings.address.strip():
        raise ConfigurationError(
            "Consul address can not be empty.",
            extra={"field": "address", "service": settings.service},
        )

    check = None
    if settings.ping_enabled:
        check = HealthCheck(
            http=build_health_check_url(settings.address, settings.port, settings.ping_endpoint),
            interval=settings.effective_ping_interval,
            deregister_critical_after=settings.effective_remove_after_interval,
        )

    return ServiceRegistration(
        id=f"{settings.service}:{uuid4().hex}",
        name=settings.service,
        address=settings.address,
        port=settings.port,
        tags=tuple(settings.tags),
        check=check,
    )
