"""Router setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from consul_discovery.infra.metrics.prometheus import REGISTRY

if TYPE_CHECKING:
    from fastapi import FastAPI

    from consul_discovery.core.settings.consul import ConsulSettings

logger = logging.getLogger(__name__)

metrics_router = APIRouter(tags=["observability"])


@metrics_router.get("/metrics")
async def metrics() -> Response:
    """Expose discovery metrics in Prometheus text format.

    Returns registration, deregistration, query outcome and latency metrics
    recorded against the agent.
    """
    data = generate_latest(REGISTRY)
    return Response(
        content=data,
        media_type=CONTENT_TYPE_LATEST,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )


async def ping() -> Response:
    """Liveness route polled by the Consul agent; always 200 with an empty body."""
    return Response(status_code=status.HTTP_200_OK)


def expose_liveness_probe(app: FastAPI, consul_settings: ConsulSettings) -> bool:
    """Bind ``GET /{ping_endpoint}`` when pinging is enabled.

    Returns:
        True if the route was added.
    """
    if not consul_settings.ping_enabled:
        return False

    path = f"/{consul_settings.ping_endpoint}"
    app.add_api_route(
        path,
        ping,
        methods=["GET"],
        include_in_schema=False,
        name="consul_ping",
    )
    logger.debug("Consul ping endpoint exposed", extra={"path": path})
    return True


def setup_routers(app: FastAPI, consul_settings: ConsulSettings | None = None) -> None:
    """Register all routes with the application.

    Args:
        app: FastAPI application instance.
        consul_settings: Optional Consul settings override.
    """
    if consul_settings is None:
        from consul_discovery.core.settings import get_consul_settings

        consul_settings = get_consul_settings()

    app.include_router(metrics_router)
    expose_liveness_probe(app, consul_settings)
