"""Logging settings (LOG_ prefix)."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_sources import create_logging_yaml_source

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingSettings(BaseSettings):
    """Root logger setup applied once at startup.

    Example: LOG_LEVEL=DEBUG, LOG_JSON=false for readable local output.
    """

    service_name: str = Field(
        default="consul-discovery",
        description="Added as the `service` key of every JSON record",
    )
    level: LogLevel = Field(default="INFO", description="Root logger level")
    json_logs: bool = Field(
        default=True,
        validation_alias=AliasChoices("log_json", "json_logs"),
        description="One JSON object per line instead of the text format",
    )
    capture_warnings: bool = Field(
        default=True,
        description="Route `warnings.warn` through logging",
    )
    include_process_info: bool = Field(
        default=False,
        description="Add process_id/process_name to JSON records",
    )
    http_client_level: LogLevel = Field(
        default="WARNING",
        description="Level of the httpx/httpcore loggers (INFO logs every agent request)",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    def to_logging_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``configure_logging``."""
        return {
            "log_level": self.level,
            "json_logs": self.json_logs,
            "capture_warnings": self.capture_warnings,
            "include_process_info": self.include_process_info,
            "http_client_level": self.http_client_level,
            "static_fields": {"service": self.service_name},
        }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        """init > conf/logging.yaml (+ logging.d) > env > .env > secrets."""
        return (
            init_settings,
            create_logging_yaml_source(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )
