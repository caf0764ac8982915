"""FastAPI lifespan: runs the registered startup hooks, then their shutdowns.

Hook order: ``core`` (logging), ``discovery`` (Consul registration, fatal on
failure), ``discovery_client`` (shared query client and services registry).
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

from consul_discovery.app.lifespan import core, discovery
from consul_discovery.app.lifespan.registry import lifespan_registry
from consul_discovery.core.settings import (
    get_app_settings,
    get_consul_settings,
    get_logging_settings,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

# Imported for their hook registrations
_ = (core, discovery)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Register with Consul before serving; deregister and close clients after.

    Raises:
        ConfigurationError: Discovery enabled without an address.
        AgentCommunicationError: The agent refused or missed the registration.
    """
    hook_kwargs = {
        "app_settings": get_app_settings(),
        "consul_settings": get_consul_settings(),
        "log_settings": get_logging_settings(),
    }
    app_settings = hook_kwargs["app_settings"]

    await lifespan_registry.startup(**hook_kwargs)
    logger.info(
        "Serving %s on %s:%s",
        app.title,
        app_settings.host,
        app_settings.port,
        extra={"service": app_settings.service_name, "environment": app_settings.environment},
    )

    yield

    logger.info("Stopping", extra={"service": app_settings.service_name})
    await lifespan_registry.shutdown(**hook_kwargs)


__all__ = ["lifespan"]
