"""Logging infrastructure.

Usage:
    from consul_discovery.infra.logging import setup_logging

    setup_logging()  # reads LOG_* settings, configures the root logger once
"""

from consul_discovery.infra.logging.config import (
    build_logging_config,
    configure_logging,
    setup_logging,
)
from consul_discovery.infra.logging.formatters import JSONFormatter

__all__ = [
    "JSONFormatter",
    "build_logging_config",
    "configure_logging",
    "setup_logging",
]
