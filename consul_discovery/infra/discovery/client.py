"""Consul agent HTTP API client with observability.

This module provides the agent client used by the lifecycle manager:
- Uses httpx for async HTTP operations
- Includes OpenTelemetry tracing for all API calls
- Records Prometheus metrics for monitoring
- Raises AgentCommunicationError when a call fails
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

import httpx
from opentelemetry import trace

from consul_discovery.core.exceptions import AgentCommunicationError
from consul_discovery.infra.discovery.metrics import (
    service_discovery_deregistrations_total,
    service_discovery_errors_total,
    service_discovery_operation_duration_seconds,
    service_discovery_registrations_total,
)

if TYPE_CHECKING:
    from consul_discovery.core.settings.consul import ConsulSettings
    from consul_discovery.infra.discovery.registration import ServiceRegistration

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class ConsulAgentClient:
    """HTTP client for the Consul Agent service endpoints.

    This client implements AgentClientProtocol:
    - ``register`` -> ``PUT /v1/agent/service/register``
    - ``deregister`` -> ``PUT /v1/agent/service/deregister/{id}``

    Example:
        client = ConsulAgentClient(get_consul_settings())
        await client.register(registration)
        ...
        await client.deregister(registration.id)
        await client.close()
    """

    def __init__(
        self,
        settings: ConsulSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the agent client.

        Args:
            settings: ConsulSettings with the agent URL, token and timeout.
            client: Preconfigured httpx client. When omitted, one is created
                against ``settings.agent_url`` and closed by ``close()``.
        """
        self._base_url = settings.agent_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self._base_url,
            headers=settings.get_auth_headers(),
            timeout=httpx.Timeout(settings.connect_timeout),
        )

        logger.debug("ConsulAgentClient initialized", extra={"agent_url": self._base_url})

    @property
    def base_url(self) -> str:
        return self._base_url

    async def register(self, registration: ServiceRegistration) -> None:
        """Register a service instance with the Consul agent.

        Args:
            registration: Registration to announce.

        Raises:
            AgentCommunicationError: On timeout, connection error or non-200 answer.
        """
        with tracer.start_as_current_span("consul.register_service") as span:
            span.set_attribute("consul.service_id", registration.id)
            span.set_attribute("consul.service_name", registration.name)
            span.set_attribute("consul.address", registration.address)
            span.set_attribute("consul.port", registration.port)

            await self._put(
                "register",
                "/v1/agent/service/register",
                span,
                service_discovery_registrations_total,
                service_id=registration.id,
                json=registration.to_payload(),
            )

        logger.info(
            "Service registered with Consul",
            extra={
                "service_id": registration.id,
                "service_name": registration.name,
                "address": registration.address,
                "port": registration.port,
            },
        )

    async def deregister(self, service_id: str) -> None:
        """Deregister a service instance from the Consul agent.

        Args:
            service_id: The service instance ID to deregister.

        Raises:
            AgentCommunicationError: On timeout, connection error or non-200 answer.
        """
        with tracer.start_as_current_span("consul.deregister_service") as span:
            span.set_attribute("consul.service_id", service_id)

            await self._put(
                "deregister",
                f"/v1/agent/service/deregister/{service_id}",
                span,
                service_discovery_deregistrations_total,
                service_id=service_id,
            )

        logger.info("Service deregistered from Consul", extra={"service_id": service_id})

    async def _put(
        self,
        operation: str,
        path: str,
        span: trace.Span,
        counter: Any,
        service_id: str,
        json: dict[str, Any] | None = None,
    ) -> None:
        start_time = time.perf_counter()
        try:
            response = await self._client.put(path, json=json)
        except httpx.TimeoutException as e:
            self._record_failure(operation, span, counter, start_time, "timeout", e)
            raise AgentCommunicationError(
                f"Consul {operation} timed out",
                operation=operation,
                extra={"service_id": service_id, "error": str(e)},
            ) from e
        except httpx.HTTPError as e:
            self._record_failure(operation, span, counter, start_time, "connection", e)
            raise AgentCommunicationError(
                f"Consul {operation} connection error",
                operation=operation,
                extra={"service_id": service_id, "error": str(e)},
            ) from e

        service_discovery_operation_duration_seconds.labels(operation=operation).observe(
            time.perf_counter() - start_time
        )

        if response.status_code != 200:
            span.set_attribute("consul.success", False)
            span.set_attribute("consul.status_code", response.status_code)
            counter.labels(status="failure").inc()
            service_discovery_errors_total.labels(
                operation=operation, error_type="http_error"
            ).inc()
            raise AgentCommunicationError(
                f"Consul {operation} failed with status {response.status_code}",
                operation=operation,
                status_code=response.status_code,
                extra={"service_id": service_id, "response": response.text[:200]},
            )

        span.set_attribute("consul.success", True)
        counter.labels(status="success").inc()

    @staticmethod
    def _record_failure(
        operation: str,
        span: trace.Span,
        counter: Any,
        start_time: float,
        error_type: str,
        error: Exception,
    ) -> None:
        service_discovery_operation_duration_seconds.labels(operation=operation).observe(
            time.perf_counter() - start_time
        )
        span.set_attribute("consul.success", False)
        span.record_exception(error)
        counter.labels(status="failure").inc()
        service_discovery_errors_total.labels(operation=operation, error_type=error_type).inc()

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()
        logger.debug("ConsulAgentClient closed")
