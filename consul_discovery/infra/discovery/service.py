"""Consul registration lifecycle.

This module provides ConsulLifecycle, which:
- Registers the instance with the agent at startup (fail-fast)
- Deregisters it exactly once at shutdown (best-effort)

State machine: UNREGISTERED -> REGISTERED -> DEREGISTERED. A failed
registration leaves the lifecycle UNREGISTERED and raises, so the
application refuses to start instead of running undiscoverable.
"""

from __future__ import annotations

from enum import Enum
import logging
import os
from typing import TYPE_CHECKING

from consul_discovery.core.exceptions import AgentCommunicationError
from consul_discovery.infra.discovery.client import ConsulAgentClient
from consul_discovery.infra.discovery.registration import (
    ENABLED_ENV_VAR,
    build_registration,
)

if TYPE_CHECKING:
    from consul_discovery.core.settings.consul import ConsulSettings
    from consul_discovery.infra.discovery.protocols import (
        AgentClientProtocol,
        ShutdownHookRegistrar,
    )
    from consul_discovery.infra.discovery.registration import ServiceRegistration

logger = logging.getLogger(__name__)


class RegistrationState(str, Enum):
    """Registration state of this process with the agent."""

    UNREGISTERED = "unregistered"
    REGISTERED = "registered"
    DEREGISTERED = "deregistered"


class ConsulLifecycle:
    """Registers a service instance at startup and deregisters it at shutdown.

    Example:
        lifecycle = ConsulLifecycle(registration, ConsulAgentClient(settings))
        await lifecycle.start()  # raises AgentCommunicationError on failure
        lifecycle.deregister_on_shutdown(lifespan_registry)
    """

    def __init__(
        self,
        registration: ServiceRegistration | None,
        client: AgentClientProtocol,
        *,
        owns_client: bool = False,
    ) -> None:
        """Initialize the lifecycle.

        Args:
            registration: Registration to announce, or None when discovery is disabled.
            client: Agent client implementation. Pass MockConsulClient for testing.
            owns_client: Close the client once the lifecycle has stopped.
        """
        self._registration = registration
        self._client = client
        self._owns_client = owns_client
        self._state = RegistrationState.UNREGISTERED

    @property
    def registration(self) -> ServiceRegistration | None:
        return self._registration

    @property
    def state(self) -> RegistrationState:
        return self._state

    @property
    def is_registered(self) -> bool:
        """Check if the instance is currently registered with the agent."""
        return self._state is RegistrationState.REGISTERED

    async def start(self) -> None:
        """Register the instance with the agent.

        Does nothing when discovery is disabled or start() already ran.

        Raises:
            AgentCommunicationError: If the agent rejects or cannot receive the
                registration.
        """
        if self._registration is None:
            logger.debug("Consul registration disabled, skipping")
            return
        if self._state is not RegistrationState.UNREGISTERED:
            return

        try:
            await self._client.register(self._registration)
        except AgentCommunicationError as e:
            logger.error(
                "Consul registration failed, aborting startup",
                extra={"service_id": self._registration.id, **e.extra},
            )
            raise

        self._state = RegistrationState.REGISTERED
        logger.info(
            "Consul service discovery started",
            extra={
                "service_id": self._registration.id,
                "service_name": self._registration.name,
                "health_check": self._registration.check.http if self._registration.check else None,
            },
        )

    async def stop(self) -> None:
        """Deregister the instance from the agent.

        Only the first call after a successful start() talks to the agent.
        Failures are logged and never raised; the process is exiting anyway.
        """
        if self._state is not RegistrationState.REGISTERED or self._registration is None:
            return

        # Flip the state first so a concurrent or repeated stop() is a no-op
        self._state = RegistrationState.DEREGISTERED
        service_id = self._registration.id
        try:
            await self._client.deregister(service_id)
        except Exception as e:
            logger.warning(
                "Error deregistering from Consul",
                extra={"service_id": service_id, "error": str(e)},
            )

        if self._owns_client:
            try:
                await self._client.close()
            except Exception as e:
                logger.warning("Error closing Consul client", extra={"error": str(e)})

        logger.debug("ConsulLifecycle stopped", extra={"service_id": service_id})

    def deregister_on_shutdown(
        self,
        hooks: ShutdownHookRegistrar,
        name: str = "discovery",
    ) -> None:
        """Attach stop() to the host's shutdown hooks."""
        hooks.register_shutdown(name, self.stop)


# ──────────────────────────────────────────────────────────────
# Module-level state and lifecycle functions
# ──────────────────────────────────────────────────────────────

_lifecycle: ConsulLifecycle | None = None


async def start_discovery(
    settings: ConsulSettings | None = None,
    client: AgentClientProtocol | None = None,
    enabled_override: str | None = None,
) -> ConsulLifecycle | None:
    """Build the registration and register with the agent.

    Call this during application startup.

    Args:
        settings: Consul settings. If None, loads cached settings.
        client: Agent client. If None, a ConsulAgentClient is created and
            owned by the lifecycle.
        enabled_override: Enable override. If None, read from ``CONSUL_ENABLED``.

    Returns:
        The started lifecycle, or None when discovery is disabled.

    Raises:
        ConfigurationError: If discovery is enabled without an address.
        AgentCommunicationError: If registration fails.
    """
    global _lifecycle

    if settings is None:
        from consul_discovery.core.settings import get_consul_settings

        settings = get_consul_settings()
    if enabled_override is None:
        enabled_override = os.environ.get(ENABLED_ENV_VAR)

    registration = build_registration(settings, enabled_override)
    if registration is None:
        logger.debug("Consul service discovery not enabled")
        return None

    owns_client = client is None
    agent_client = client if client is not None else ConsulAgentClient(settings)
    lifecycle = ConsulLifecycle(registration, agent_client, owns_client=owns_client)
    try:
        await lifecycle.start()
    except AgentCommunicationError:
        if owns_client:
            await agent_client.close()
        raise

    _lifecycle = lifecycle
    return lifecycle


async def stop_discovery() -> None:
    """Deregister and forget the current lifecycle. Never raises."""
    global _lifecycle

    if _lifecycle is not None:
        await _lifecycle.stop()
        _lifecycle = None


def get_discovery_service() -> ConsulLifecycle | None:
    """Get the current registration lifecycle.

    Returns:
        ConsulLifecycle instance if started, None otherwise.
    """
    return _lifecycle
