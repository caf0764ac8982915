"""Root logger configuration.

Handlers live on the root logger only; module loggers propagate to it. The
``default`` formatter is either the JSON Lines formatter or a plain text one.
"""

from __future__ import annotations

import logging
import logging.config
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from consul_discovery.core.settings.logs import LoggingSettings

logger = logging.getLogger(__name__)

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
HTTP_CLIENT_LOGGERS = ("httpx", "httpcore")

_configured = False


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **overrides: Any,
) -> None:
    """Configure logging from LoggingSettings, once per process.

    Args:
        log_settings: Settings to apply; the cached LOG_* settings when omitted.
        force: Apply again even if logging was already configured.
        **overrides: Replace individual ``configure_logging`` arguments.
    """
    global _configured

    if _configured and not force:
        return

    if log_settings is None:
        from consul_discovery.core.settings import get_logging_settings

        log_settings = get_logging_settings()

    configure_logging(**{**log_settings.to_logging_kwargs(), **overrides})
    _configured = True


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    capture_warnings: bool = True,
    include_process_info: bool = False,
    http_client_level: str = "WARNING",
    static_fields: dict[str, Any] | None = None,
    **unused: Any,
) -> None:
    """Apply a dictConfig built by ``build_logging_config``.

    Unknown keyword arguments are ignored and reported at DEBUG.
    """
    logging.captureWarnings(capture_warnings)
    logging.config.dictConfig(
        build_logging_config(
            log_level=log_level,
            json_logs=json_logs,
            include_process_info=include_process_info,
            static_fields=static_fields,
            http_client_level=http_client_level,
        )
    )
    if unused:
        logger.debug("Ignoring logging options: %s", ", ".join(sorted(unused)))


def build_logging_config(
    log_level: str,
    json_logs: bool,
    include_process_info: bool,
    static_fields: dict[str, Any] | None,
    http_client_level: str = "WARNING",
) -> dict[str, Any]:
    """Return the dictConfig mapping for these options."""
    formatter: dict[str, Any]
    if json_logs:
        formatter = {
            "()": "consul_discovery.infra.logging.formatters.JSONFormatter",
            "static": static_fields or {},
            "include_process_info": include_process_info,
        }
    else:
        formatter = {"format": TEXT_FORMAT}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": formatter},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stderr",
            },
        },
        "root": {"level": log_level, "handlers": ["console"]},
        "loggers": {name: {"level": http_client_level} for name in HTTP_CLIENT_LOGGERS},
    }
