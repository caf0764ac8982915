"""Exception classes for Consul service discovery."""

from __future__ import annotations

from typing import Any


class DiscoveryError(Exception):
    """Base service discovery exception.

    All discovery exceptions carry a human-readable ``detail`` and an
    ``extra`` mapping with context for structured logging.

    Attributes:
        detail: Human-readable error message.
        extra: Additional context-specific information about the error.
    """

    def __init__(self, detail: str, extra: dict[str, Any] | None = None) -> None:
        """Initialize discovery exception.

        Args:
            detail: Human-readable error message.
            extra: Additional context about the error.
        """
        self.detail = detail
        self.extra = extra or {}
        super().__init__(detail)


class ConfigurationError(DiscoveryError):
    """Raised when discovery configuration is invalid or incomplete.

    Example:
        raise ConfigurationError(
            "Consul address can not be empty.",
            extra={"field": "address"},
        )
    """


class AgentCommunicationError(DiscoveryError):
    """Raised when a call to the Consul agent fails.

    Attributes:
        operation: Agent operation that failed (register, deregister, query).
        status_code: HTTP status returned by the agent, if any.
    """

    def __init__(
        self,
        detail: str,
        operation: str,
        status_code: int | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize agent communication exception.

        Args:
            detail: Human-readable error message.
            operation: Agent operation that failed.
            status_code: HTTP status code, when the agent answered.
            extra: Additional context about the error.
        """
        self.operation = operation
        self.status_code = status_code
        super().__init__(detail, extra)


class QueryDecodeError(DiscoveryError):
    """Raised when a successful query response cannot be decoded."""

    def __init__(self, detail: str, url: str, extra: dict[str, Any] | None = None) -> None:
        self.url = url
        super().__init__(detail, extra)


__all__ = [
    "AgentCommunicationError",
    "ConfigurationError",
    "DiscoveryError",
    "QueryDecodeError",
]
