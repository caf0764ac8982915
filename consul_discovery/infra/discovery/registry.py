"""Resolution of registered service instances by name.

Reads the local agent's service catalogue and picks one instance at random,
which spreads calls across instances without any client-side state.
"""

from __future__ import annotations

import logging
import random

import httpx

from consul_discovery.infra.discovery.http import ConsulHttpClient, ensure_scheme
from consul_discovery.infra.discovery.schemas import AgentService

logger = logging.getLogger(__name__)


class ConsulServicesRegistry:
    """Look up instances of a service registered with the agent.

    Example:
        registry = ConsulServicesRegistry(ConsulHttpClient(), settings.agent_url)
        instance = await registry.get("orders-service")
        url = await registry.resolve_url("http://orders-service/api/orders")
    """

    def __init__(
        self,
        http_client: ConsulHttpClient,
        agent_url: str,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the registry.

        Args:
            http_client: Query client used to read the agent catalogue.
            agent_url: Consul agent base URL.
            rng: Random source for instance selection (seed it in tests).
        """
        self._http = http_client
        self._services_url = f"{agent_url.rstrip('/')}/v1/agent/services"
        self._rng = rng or random.Random()

    async def get(self, name: str) -> AgentService | None:
        """Return a random registered instance of ``name``, or None."""
        services = await self._http.get_json(
            self._services_url,
            dict[str, AgentService],
            default={},
        )
        instances = [s for s in (services or {}).values() if s.service == name]
        if not instances:
            logger.debug("No registered instances found", extra={"service_name": name})
            return None
        return self._rng.choice(instances)

    async def resolve_url(self, url: str) -> str:
        """Replace a service name host in ``url`` by a registered instance.

        ``http://orders-service/api/orders`` becomes
        ``http://10.0.0.5:5000/api/orders``. A URL without a scheme is read as
        ``http://``. The URL is returned unchanged when no instance of that name
        is registered.
        """
        parsed = httpx.URL(ensure_scheme(url))
        instance = await self.get(parsed.host)
        if instance is None:
            return url
        host = instance.address or parsed.host
        if "://" in host:
            host = httpx.URL(host).host
        port = instance.port if instance.port > 0 else parsed.port
        return str(parsed.copy_with(host=host, port=port))
