"""Process-wide settings instances.

Each getter builds its settings on first use and returns the same frozen
instance afterwards. Tests call ``clear_all_caches()`` after changing the
environment.
"""

from __future__ import annotations

from functools import lru_cache

from .app import AppSettings
from .consul import ConsulSettings
from .logs import LoggingSettings


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    return AppSettings()


@lru_cache(maxsize=1)
def get_consul_settings() -> ConsulSettings:
    """CONSUL_* settings used for registration, the ping route and queries."""
    return ConsulSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    return LoggingSettings()


def clear_all_caches() -> None:
    """Forget every cached settings instance."""
    for getter in (get_app_settings, get_consul_settings, get_logging_settings):
        getter.cache_clear()
