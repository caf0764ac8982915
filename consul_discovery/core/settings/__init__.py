"""Modular Pydantic Settings v2 configuration.

Import settings via cached loaders:
    from consul_discovery.core.settings import get_consul_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. YAML/conf.d files (optional, local/dev)
    3. Environment variables (production)
    4. .env file (development only)
    5. secrets_dir (Kubernetes/Docker secrets)
"""

from __future__ import annotations

from .app import AppSettings
from .consul import ConsulSettings
from .loader import (
    clear_all_caches,
    get_app_settings,
    get_consul_settings,
    get_logging_settings,
)
from .logs import LoggingSettings

__all__ = [
    "AppSettings",
    "ConsulSettings",
    "LoggingSettings",
    "clear_all_caches",
    "get_app_settings",
    "get_consul_settings",
    "get_logging_settings",
]
