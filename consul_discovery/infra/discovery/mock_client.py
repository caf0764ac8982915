"""In-memory Consul agent client for testing without a real Consul instance.

Usage in tests:
    from consul_discovery.infra.discovery.mock_client import MockConsulClient

    @pytest.fixture
    def mock_consul():
        return MockConsulClient()

    async def test_lifecycle(mock_consul, registration):
        lifecycle = ConsulLifecycle(registration, mock_consul)
        await lifecycle.start()
        assert registration.id in mock_consul.services
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Any

from consul_discovery.core.exceptions import AgentCommunicationError

if TYPE_CHECKING:
    from consul_discovery.infra.discovery.registration import ServiceRegistration

logger = logging.getLogger(__name__)


@dataclass
class CallRecord:
    """Record of a method call for assertion in tests."""

    method: str
    args: dict[str, Any]
    success: bool


class MockConsulClient:
    """In-memory agent client implementing AgentClientProtocol.

    Attributes:
        services: Registered services by service ID.
        call_history: List of all method calls for assertion.
        fail_next_call: Set to True to make the next call raise
            AgentCommunicationError.
        closed: Whether close() has been called.
    """

    def __init__(self) -> None:
        self.services: dict[str, ServiceRegistration] = {}
        self.call_history: list[CallRecord] = []
        self.fail_next_call: bool = False
        self.closed: bool = False

    def _fail_if_requested(self, method: str, call_args: dict[str, Any]) -> None:
        if self.fail_next_call:
            self.fail_next_call = False
            self.call_history.append(CallRecord(method, call_args, False))
            logger.debug("MockConsulClient: %s failed (simulated)", method)
            raise AgentCommunicationError(
                f"Simulated {method} failure",
                operation=method,
                status_code=500,
            )

    async def register(self, registration: ServiceRegistration) -> None:
        """Store the registration in memory."""
        call_args = {"service_id": registration.id, "payload": registration.to_payload()}
        self._fail_if_requested("register", call_args)

        self.services[registration.id] = registration
        self.call_history.append(CallRecord("register", call_args, True))
        logger.debug("MockConsulClient: registered service %s", registration.id)

    async def deregister(self, service_id: str) -> None:
        """Remove the registration from memory."""
        call_args = {"service_id": service_id}
        self._fail_if_requested("deregister", call_args)

        self.services.pop(service_id, None)
        self.call_history.append(CallRecord("deregister", call_args, True))
        logger.debug("MockConsulClient: deregistered service %s", service_id)

    async def close(self) -> None:
        """Mark the client as closed."""
        self.closed = True
        self.call_history.append(CallRecord("close", {}, True))

    # ──────────────────────────────────────────────────────────────
    # Test helper methods
    # ──────────────────────────────────────────────────────────────

    def get_calls(self, method: str | None = None) -> list[CallRecord]:
        """Get call history, optionally filtered by method."""
        if method is None:
            return list(self.call_history)
        return [c for c in self.call_history if c.method == method]

    def reset(self) -> None:
        """Clear services, call history, and flags."""
        self.services.clear()
        self.call_history.clear()
        self.fail_next_call = False
        self.closed = False
