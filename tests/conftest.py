"""Pytest configuration and shared fixtures.

Organization:
    - Environment Fixtures: isolate tests from CONSUL_* variables and cached settings
    - Discovery Fixtures: settings, registrations and the in-memory agent client
"""

from __future__ import annotations

import os

import pytest

from consul_discovery.core.settings import ConsulSettings, clear_all_caches
from consul_discovery.infra.discovery import MockConsulClient, build_registration

# Ensure tests run without external infrastructure
os.environ.setdefault("LOG_JSON", "false")


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_consul_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Remove CONSUL_* variables and point config dirs at an empty directory.

    Settings caches are cleared before and after every test so values built
    from a monkeypatched environment never leak.
    """
    for key in list(os.environ):
        if key.startswith("CONSUL_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("CONSUL_CONFIG_DIR", str(tmp_path / "conf"))
    monkeypatch.setenv("APP_CONFIG_DIR", str(tmp_path / "conf"))
    monkeypatch.setenv("LOGGING_CONFIG_DIR", str(tmp_path / "conf"))
    clear_all_caches()
    yield
    clear_all_caches()


# ============================================================================
# Discovery Fixtures
# ============================================================================


@pytest.fixture
def consul_settings() -> ConsulSettings:
    """Enabled settings with an HTTP ping check.

    Example:
        def test_url(consul_settings):
            assert consul_settings.agent_url == "http://127.0.0.1:8500"
    """
    return ConsulSettings(
        enabled=True,
        service="orders-service",
        address="10.0.0.5",
        port=5000,
        ping_enabled=True,
        ping_endpoint="ping",
    )


@pytest.fixture
def registration(consul_settings):
    """Registration built from the enabled settings fixture."""
    return build_registration(consul_settings)


@pytest.fixture
def mock_consul() -> MockConsulClient:
    """In-memory agent client."""
    return MockConsulClient()
