"""Consul service discovery infrastructure.

This package provides Consul service discovery integration with:
- Registration built from settings (environment override, default intervals,
  health check URL derivation, unique instance IDs)
- Fail-fast registration at startup, best-effort deregistration at shutdown
- A typed JSON GET client with a soft-miss contract
- Instance resolution by service name
- OpenTelemetry tracing and Prometheus metrics
- Mock agent client for testing

Usage:
    # In lifespan - startup (raises if registration fails)
    from consul_discovery.infra.discovery import start_discovery

    lifecycle = await start_discovery()
    if lifecycle is not None:
        lifecycle.deregister_on_shutdown(lifespan_registry)

Configuration:
    CONSUL_ENABLED=true
    CONSUL_SERVICE=orders-service
    CONSUL_ADDRESS=10.0.0.5
    CONSUL_PORT=5000
    CONSUL_URL=http://consul.service.consul:8500
    CONSUL_PING_ENABLED=true
    CONSUL_PING_ENDPOINT=ping

Testing:
    from consul_discovery.infra.discovery import ConsulLifecycle, MockConsulClient

    mock_client = MockConsulClient()
    lifecycle = ConsulLifecycle(registration, mock_client)
    await lifecycle.start()
    assert mock_client.services
"""

from consul_discovery.infra.discovery.client import ConsulAgentClient
from consul_discovery.infra.discovery.http import ConsulHttpClient
from consul_discovery.infra.discovery.mock_client import MockConsulClient
from consul_discovery.infra.discovery.protocols import (
    AgentClientProtocol,
    ShutdownHookRegistrar,
)
from consul_discovery.infra.discovery.registration import (
    HealthCheck,
    ServiceRegistration,
    build_health_check_url,
    build_registration,
)
from consul_discovery.infra.discovery.registry import ConsulServicesRegistry
from consul_discovery.infra.discovery.schemas import AgentService
from consul_discovery.infra.discovery.service import (
    ConsulLifecycle,
    RegistrationState,
    get_discovery_service,
    start_discovery,
    stop_discovery,
)

__all__ = [
    # Protocols
    "AgentClientProtocol",
    "ShutdownHookRegistrar",
    # Registration
    "HealthCheck",
    "ServiceRegistration",
    "build_health_check_url",
    "build_registration",
    # Clients
    "ConsulAgentClient",
    "ConsulHttpClient",
    "MockConsulClient",
    # Resolution
    "AgentService",
    "ConsulServicesRegistry",
    # Lifecycle
    "ConsulLifecycle",
    "RegistrationState",
    "start_discovery",
    "stop_discovery",
    "get_discovery_service",
]
