"""Tests for the typed JSON GET query client."""

from __future__ import annotations

import httpx
from pydantic import BaseModel
import pytest

from consul_discovery.core.exceptions import AgentCommunicationError, QueryDecodeError
from consul_discovery.infra.discovery.http import ConsulHttpClient, ensure_scheme
from consul_discovery.infra.discovery.registry import ConsulServicesRegistry
from consul_discovery.infra.discovery.schemas import AgentService


class Order(BaseModel):
    id: int
    status: str


def make_client(handler) -> ConsulHttpClient:
    return ConsulHttpClient(httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.mark.unit
class TestEnsureScheme:
    """Scheme prefixing."""

    def test_adds_http_to_bare_path(self):
        assert ensure_scheme("orders/1") == "http://orders/1"

    def test_keeps_http(self):
        assert ensure_scheme("http://orders/1") == "http://orders/1"

    def test_keeps_https(self):
        assert ensure_scheme("HTTPS://orders/1") == "HTTPS://orders/1"


@pytest.mark.asyncio
class TestGetJson:
    """Soft-miss and decoding behavior."""

    async def test_non_success_returns_none(self):
        client = make_client(lambda request: httpx.Response(404))

        assert await client.get_json("orders/1", Order) is None

    async def test_non_success_returns_supplied_default(self):
        client = make_client(lambda request: httpx.Response(503, text="not json"))

        assert await client.get_json("orders", list[Order], default=[]) == []

    async def test_bare_path_requested_over_http(self):
        seen: list[httpx.URL] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url)
            return httpx.Response(200, json={"id": 1, "status": "new"})

        client = make_client(handler)
        await client.get_json("orders-service/orders/1")

        assert str(seen[0]) == "http://orders-service/orders/1"

    async def test_raw_json_without_type(self):
        client = make_client(lambda request: httpx.Response(200, json={"a": [1, 2]}))

        assert await client.get_json("http://x/y") == {"a": [1, 2]}

    async def test_validates_into_model(self):
        client = make_client(lambda request: httpx.Response(200, json={"id": 7, "status": "paid"}))

        order = await client.get_json("http://orders/7", Order)

        assert order == Order(id=7, status="paid")

    async def test_validates_agent_services_mapping(self):
        body = {
            "orders-1": {"ID": "orders-1", "Service": "orders", "Address": "10.0.0.5", "Port": 5000},
        }
        client = make_client(lambda request: httpx.Response(200, json=body))

        services = await client.get_json("consul:8500/v1/agent/services", dict[str, AgentService])

        assert services["orders-1"].address == "10.0.0.5"
        assert services["orders-1"].port == 5000

    async def test_invalid_json_raises_decode_error(self):
        client = make_client(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(QueryDecodeError) as exc_info:
            await client.get_json("http://orders/7")

        assert exc_info.value.url == "http://orders/7"

    async def test_validation_failure_raises_decode_error(self):
        client = make_client(lambda request: httpx.Response(200, json={"id": "x"}))

        with pytest.raises(QueryDecodeError):
            await client.get_json("http://orders/7", Order)

    async def test_transport_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = make_client(handler)

        with pytest.raises(AgentCommunicationError) as exc_info:
            await client.get_json("http://orders/7")

        assert exc_info.value.operation == "query"

    async def test_timeout_is_passed_through(self):
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.extensions["timeout"])
            return httpx.Response(200, json=[])

        client = make_client(handler)
        await client.get_json("http://orders", timeout=1.5)

        assert seen[0]["read"] == 1.5

    async def test_close_owned_client(self):
        client = ConsulHttpClient()

        await client.close()

        assert client._client.is_closed


@pytest.mark.asyncio
class TestServiceNameResolution:
    """Service name hosts routed to registered instances."""

    AGENT_SERVICES = {
        "orders-service:a": {
            "ID": "orders-service:a",
            "Service": "orders-service",
            "Address": "10.0.0.5",
            "Port": 5000,
        },
    }

    def make_resolving_client(self, seen: list[str]) -> ConsulHttpClient:
        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            if request.url.host == "consul.test":
                return httpx.Response(200, json=self.AGENT_SERVICES)
            if (request.url.host, request.url.port) == ("10.0.0.5", 5000):
                return httpx.Response(200, json={"id": 1, "status": "new"})
            return httpx.Response(404)

        shared = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        registry = ConsulServicesRegistry(ConsulHttpClient(shared), "http://consul.test:8500")
        return ConsulHttpClient(shared, resolver=registry.resolve_url)

    async def test_service_name_reaches_instance(self):
        seen: list[str] = []
        client = self.make_resolving_client(seen)

        order = await client.get_json("orders-service/api/orders/1", Order)

        assert order == Order(id=1, status="new")
        assert seen == [
            "http://consul.test:8500/v1/agent/services",
            "http://10.0.0.5:5000/api/orders/1",
        ]

    async def test_unknown_service_sent_as_given(self):
        seen: list[str] = []
        client = self.make_resolving_client(seen)

        assert await client.get_json("http://billing/api", default="missing") == "missing"
        assert seen[-1] == "http://billing/api"

    async def test_resolution_is_opt_in(self):
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(404)

        client = make_client(handler)
        await client.get_json("orders-service/api/orders/1")

        assert not client.resolves_service_names
        assert seen == ["http://orders-service/api/orders/1"]
