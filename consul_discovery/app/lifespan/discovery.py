"""Consul service discovery lifespan management.

Registration is fail-fast: if the agent rejects the registration, the
startup hook raises and the application does not start. Shutdown runs
``stop_discovery``, which deregisters once and forgets the lifecycle.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from consul_discovery.infra.discovery import (
    ConsulHttpClient,
    ConsulServicesRegistry,
    start_discovery,
    stop_discovery,
)

from .registry import lifespan_registry

if TYPE_CHECKING:
    from consul_discovery.core.settings import ConsulSettings

logger = logging.getLogger(__name__)

_http_client: httpx.AsyncClient | None = None
_query_client: ConsulHttpClient | None = None
_services_registry: ConsulServicesRegistry | None = None


@lifespan_registry.register(
    name="discovery",
    startup_order=5,
    requires=["core"],
)
async def startup_discovery(
    consul_settings: ConsulSettings,
    **kwargs: object,
) -> None:
    """Register this instance with the Consul agent.

    Args:
        consul_settings: Consul settings
        **kwargs: Additional settings (ignored)

    Raises:
        ConfigurationError: If discovery is enabled without an address.
        AgentCommunicationError: If the agent registration fails.
    """
    lifecycle = await start_discovery(consul_settings)
    if lifecycle is None:
        logger.info("Consul service discovery disabled")
        return

    lifespan_registry.register_shutdown("discovery", stop_discovery)
    logger.info(
        "Consul service discovery started",
        extra={"consul_url": consul_settings.agent_url},
    )


@lifespan_registry.register(
    name="discovery_client",
    startup_order=6,
    requires=["core"],
)
async def startup_discovery_client(
    consul_settings: ConsulSettings,
    **kwargs: object,
) -> None:
    """Create the shared query client and services registry.

    Both share one connection pool. The registry reads the agent catalogue
    with a plain client; the query client resolves service name hosts through
    the registry unless ``resolve_services`` is off.

    Args:
        consul_settings: Consul settings
        **kwargs: Additional settings (ignored)
    """
    global _http_client, _query_client, _services_registry

    _http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(consul_settings.connect_timeout),
        headers=consul_settings.get_auth_headers(),
    )
    _services_registry = ConsulServicesRegistry(
        ConsulHttpClient(_http_client),
        consul_settings.agent_url,
    )
    resolver = _services_registry.resolve_url if consul_settings.resolve_services else None
    _query_client = ConsulHttpClient(_http_client, resolver=resolver)


@lifespan_registry.on_shutdown("discovery_client")
async def shutdown_discovery_client(**kwargs: object) -> None:
    """Close the shared connection pool.

    Args:
        **kwargs: Settings (ignored)
    """
    global _http_client, _query_client, _services_registry

    if _http_client is not None:
        await _http_client.aclose()
    _http_client = None
    _query_client = None
    _services_registry = None


def get_query_client() -> ConsulHttpClient | None:
    """Get the shared query client, if the application has started."""
    return _query_client


def get_services_registry() -> ConsulServicesRegistry | None:
    """Get the shared services registry, if the application has started."""
    return _services_registry
