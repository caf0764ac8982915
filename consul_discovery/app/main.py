"""FastAPI application factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI

from consul_discovery.app.lifespan import lifespan
from consul_discovery.app.router import setup_routers
from consul_discovery.core.settings import get_app_settings

if TYPE_CHECKING:
    from consul_discovery.core.settings.consul import ConsulSettings


def create_app(consul_settings: ConsulSettings | None = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        consul_settings: Optional Consul settings override for the ping route.
            Registration itself always uses the cached settings loaded by the
            lifespan.

    Returns:
        Configured FastAPI application instance.
    """
    app_settings = get_app_settings()

    app = FastAPI(
        title=app_settings.title,
        version=app_settings.version,
        debug=app_settings.debug,
        lifespan=lifespan,
    )

    setup_routers(app, consul_settings)

    return app
