"""FastAPI dependencies."""

from consul_discovery.core.dependencies.discovery import (
    ConsulHttpClientDep,
    ServicesRegistryDep,
    get_query_client_dep,
    get_services_registry_dep,
)

__all__ = [
    "ConsulHttpClientDep",
    "ServicesRegistryDep",
    "get_query_client_dep",
    "get_services_registry_dep",
]
