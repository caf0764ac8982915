"""Service discovery dependencies for FastAPI route handlers.

Usage:
    from consul_discovery.core.dependencies.discovery import (
        ConsulHttpClientDep,
        ServicesRegistryDep,
    )

    @router.get("/orders/{order_id}")
    async def get_order(order_id: str, services: ServicesRegistryDep):
        url = await services.resolve_url(f"http://orders-service/orders/{order_id}")
        ...
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, status

from consul_discovery.infra.discovery import ConsulHttpClient, ConsulServicesRegistry


def _unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={
            "error": "discovery_unavailable",
            "message": "Service discovery client is not initialized",
        },
    )


def get_query_client_dep() -> ConsulHttpClient:
    """Get the shared query client.

    The import is deferred to runtime to avoid circular dependencies.

    Raises:
        HTTPException: 503 Service Unavailable before application startup.
    """
    from consul_discovery.app.lifespan.discovery import get_query_client

    client = get_query_client()
    if client is None:
        raise _unavailable()
    return client


def get_services_registry_dep() -> ConsulServicesRegistry:
    """Get the shared services registry.

    Raises:
        HTTPException: 503 Service Unavailable before application startup.
    """
    from consul_discovery.app.lifespan.discovery import get_services_registry

    registry = get_services_registry()
    if registry is None:
        raise _unavailable()
    return registry


ConsulHttpClientDep = Annotated[ConsulHttpClient, Depends(get_query_client_dep)]
"""Shared typed JSON GET client."""

ServicesRegistryDep = Annotated[ConsulServicesRegistry, Depends(get_services_registry_dep)]
"""Shared registry resolving service names to registered instances."""
