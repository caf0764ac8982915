"""Protocol definitions for the discovery lifecycle collaborators.

This module defines:
- AgentClientProtocol: the register/deregister contract of a Consul agent client
- ShutdownHookRegistrar: the host lifecycle hook the lifecycle manager attaches to
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from consul_discovery.infra.discovery.registration import ServiceRegistration


@runtime_checkable
class AgentClientProtocol(Protocol):
    """Protocol for Consul agent registration operations.

    Implementations raise AgentCommunicationError when the agent cannot be
    reached or rejects the call.
    """

    async def register(self, registration: ServiceRegistration) -> None:
        """Register a service instance with the agent.

        Args:
            registration: The registration to announce.

        Raises:
            AgentCommunicationError: If the agent call fails.
        """
        ...

    async def deregister(self, service_id: str) -> None:
        """Deregister a service instance from the agent.

        Args:
            service_id: The service instance ID to deregister.

        Raises:
            AgentCommunicationError: If the agent call fails.
        """
        ...

    async def close(self) -> None:
        """Close the client and release resources."""
        ...


@runtime_checkable
class ShutdownHookRegistrar(Protocol):
    """Host lifecycle that runs callbacks when the application stops."""

    def register_shutdown(self, name: str, callback: Callable[[], Awaitable[None]]) -> None:
        """Run ``callback`` once when the application shuts down."""
        ...
