"""First lifespan hook: logging, so later hooks log through the configured root logger."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from consul_discovery.infra.logging.config import setup_logging

from .registry import lifespan_registry

if TYPE_CHECKING:
    from consul_discovery.core.settings import AppSettings, LoggingSettings

logger = logging.getLogger(__name__)


@lifespan_registry.register(name="core", startup_order=1)
async def startup_core(
    app_settings: AppSettings,
    log_settings: LoggingSettings,
    **kwargs: object,
) -> None:
    """Apply LOG_* settings, replacing any earlier logging setup."""
    setup_logging(log_settings=log_settings, force=True)
    logger.info(
        "Application starting",
        extra={"service": app_settings.service_name, "environment": app_settings.environment},
    )
