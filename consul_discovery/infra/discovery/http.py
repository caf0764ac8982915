"""Typed JSON GET client for querying Consul and discovered services.

Non-success responses are a soft miss: ``get_json`` returns the caller's
default instead of raising. A success response whose body is not valid JSON,
or does not validate against the requested type, raises QueryDecodeError.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar, overload

import httpx
from pydantic import TypeAdapter, ValidationError

from consul_discovery.core.exceptions import AgentCommunicationError, QueryDecodeError
from consul_discovery.infra.discovery.metrics import (
    service_discovery_operation_duration_seconds,
    service_discovery_queries_total,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    UrlResolver = Callable[[str], Awaitable[str]]

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SCHEMES = ("http://", "https://")


def ensure_scheme(path: str) -> str:
    """Prefix ``http://`` unless the path already names a scheme."""
    if path.lower().startswith(_SCHEMES):
        return path
    return f"http://{path}"


class ConsulHttpClient:
    """Stateless GET-and-decode helper.

    Safe for concurrent use: each call is an independent request on the
    shared connection pool.

    Example:
        client = ConsulHttpClient()
        services = await client.get_json(
            "127.0.0.1:8500/v1/agent/services",
            dict[str, AgentService],
            default={},
        )
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = 5.0,
        headers: dict[str, str] | None = None,
        resolver: UrlResolver | None = None,
    ) -> None:
        """Initialize the query client.

        Args:
            client: Preconfigured httpx client. When omitted, one is created
                and closed by ``close()``.
            timeout: Default request timeout in seconds for a created client.
            headers: Default headers for a created client (e.g. X-Consul-Token).
            resolver: Rewrites each URL before it is sent, typically
                ``ConsulServicesRegistry.resolve_url`` so that a service name host
                reaches a registered instance. None sends URLs as given.
        """
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers=headers,
        )
        self._resolver = resolver

    @property
    def resolves_service_names(self) -> bool:
        return self._resolver is not None

    @overload
    async def get_json(
        self,
        path: str,
        response_type: type[T],
        *,
        default: T | None = None,
        timeout: float | httpx.Timeout | None = None,
    ) -> T | None: ...

    @overload
    async def get_json(
        self,
        path: str,
        response_type: None = None,
        *,
        default: Any = None,
        timeout: float | httpx.Timeout | None = None,
    ) -> Any: ...

    async def get_json(
        self,
        path: str,
        response_type: Any = None,
        *,
        default: Any = None,
        timeout: float | httpx.Timeout | None = None,
    ) -> Any:
        """GET ``path`` and decode the JSON body.

        Args:
            path: URL, with or without scheme (``http://`` is assumed). With a
                resolver, a service name host is replaced by a registered instance.
            response_type: Type to validate the body against (pydantic model,
                ``list[Model]``, ``dict[str, Model]``...). None returns raw JSON.
            default: Value returned when the response status is not 2xx.
            timeout: Per-call timeout overriding the client default.

        Returns:
            The decoded body, or ``default`` on a non-success status.

        Raises:
            QueryDecodeError: If a 2xx body cannot be decoded or validated.
            AgentCommunicationError: If the request cannot be sent, or the
                resolver cannot read the agent catalogue.
        """
        url = ensure_scheme(path)
        if self._resolver is not None:
            url = await self._resolver(url)
        request_timeout = httpx.USE_CLIENT_DEFAULT if timeout is None else timeout

        try:
            with service_discovery_operation_duration_seconds.labels(operation="query").time():
                response = await self._client.get(url, timeout=request_timeout)
        except httpx.HTTPError as e:
            service_discovery_queries_total.labels(result="transport_error").inc()
            raise AgentCommunicationError(
                f"GET {url} failed",
                operation="query",
                extra={"url": url, "error": str(e)},
            ) from e

        if not response.is_success:
            service_discovery_queries_total.labels(result="miss").inc()
            logger.debug(
                "Query returned non-success status",
                extra={"url": url, "status_code": response.status_code},
            )
            return default

        try:
            if response_type is None:
                result = response.json()
            else:
                result = TypeAdapter(response_type).validate_json(response.content)
        except (ValueError, ValidationError) as e:
            service_discovery_queries_total.labels(result="decode_error").inc()
            raise QueryDecodeError(
                f"Could not decode response from {url}",
                url=url,
                extra={"status_code": response.status_code, "error": str(e)},
            ) from e

        service_discovery_queries_total.labels(result="hit").inc()
        return result

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()
