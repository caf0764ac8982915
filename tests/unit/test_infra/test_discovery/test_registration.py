"""Tests for building the agent registration from settings."""

from __future__ import annotations

import pytest

from consul_discovery.core.exceptions import ConfigurationError
from consul_discovery.core.settings import ConsulSettings
from consul_discovery.infra.discovery.registration import (
    build_health_check_url,
    build_registration,
    resolve_enabled,
)


@pytest.mark.unit
class TestEnabledResolution:
    """Configured flag combined with the CONSUL_ENABLED override."""

    def test_disabled_without_override_returns_none(self):
        settings = ConsulSettings(enabled=False, address="myhost")

        assert build_registration(settings) is None

    def test_disabled_does_not_require_address(self):
        settings = ConsulSettings(enabled=False, address="")

        assert build_registration(settings) is None

    @pytest.mark.parametrize("override", ["1", "true", "TRUE", "True"])
    def test_override_forces_enabled(self, override):
        settings = ConsulSettings(enabled=False, address="myhost")

        registration = build_registration(settings, enabled_override=override)

        assert registration is not None

    @pytest.mark.parametrize("override", ["false", "0", "yes", "off", " 1 ", " true"])
    def test_override_forces_disabled(self, override):
        settings = ConsulSettings(enabled=True, address="myhost")

        assert build_registration(settings, enabled_override=override) is None

    @pytest.mark.parametrize("override", [None, "", "   "])
    def test_blank_override_keeps_configured_value(self, override):
        enabled = ConsulSettings(enabled=True, address="myhost")
        disabled = ConsulSettings(enabled=False, address="myhost")

        assert resolve_enabled(enabled, override) is True
        assert resolve_enabled(disabled, override) is False


@pytest.mark.unit
class TestBuildRegistration:
    """Registration contents."""

    @pytest.mark.parametrize("address", ["", "   "])
    def test_enabled_with_empty_address_raises(self, address):
        settings = ConsulSettings(enabled=True, address=address)

        with pytest.raises(ConfigurationError, match="address"):
            build_registration(settings)

    def test_override_enabled_with_empty_address_raises(self):
        settings = ConsulSettings(enabled=False, address="")

        with pytest.raises(ConfigurationError):
            build_registration(settings, enabled_override="1")

    def test_fields_copied_from_settings(self, consul_settings):
        registration = build_registration(consul_settings)

        assert registration.name == "orders-service"
        assert registration.address == "10.0.0.5"
        assert registration.port == 5000

    def test_id_is_service_name_and_random_hex(self, consul_settings):
        registration = build_registration(consul_settings)

        name, _, suffix = registration.id.partition(":")
        assert name == "orders-service"
        assert len(suffix) == 32
        int(suffix, 16)

    def test_consecutive_builds_have_different_ids(self, consul_settings):
        first = build_registration(consul_settings)
        second = build_registration(consul_settings)

        assert first.id != second.id

    def test_no_check_when_ping_disabled(self):
        settings = ConsulSettings(enabled=True, address="myhost", ping_enabled=False)

        registration = build_registration(settings)

        assert registration.check is None
        assert "Checks" not in registration.to_payload()

    def test_check_uses_configured_intervals(self):
        settings = ConsulSettings(
            enabled=True,
            address="myhost",
            ping_enabled=True,
            ping_interval=15,
            remove_after_interval=60,
        )

        check = build_registration(settings).check

        assert check.interval == 15
        assert check.deregister_critical_after == 60

    @pytest.mark.parametrize("value", [0, -1])
    def test_non_positive_intervals_fall_back_to_defaults(self, value):
        settings = ConsulSettings(
            enabled=True,
            address="myhost",
            ping_enabled=True,
            ping_interval=value,
            remove_after_interval=value,
        )

        check = build_registration(settings).check

        assert check.interval == 5
        assert check.deregister_critical_after == 10

    def test_payload_matches_agent_api(self):
        settings = ConsulSettings(
            enabled=True,
            service="orders-service",
            address="myhost",
            port=8080,
            tags=["api", "v1"],
            ping_enabled=True,
            ping_endpoint="health",
        )
        registration = build_registration(settings)

        payload = registration.to_payload()

        assert payload == {
            "ID": registration.id,
            "Name": "orders-service",
            "Address": "myhost",
            "Port": 8080,
            "Tags": ["api", "v1"],
            "Checks": [
                {
                    "HTTP": "http://myhost:8080/health",
                    "Interval": "5s",
                    "DeregisterCriticalServiceAfter": "10s",
                }
            ],
        }

    def test_registration_is_immutable(self, registration):
        with pytest.raises(AttributeError):
            registration.id = "other"


@pytest.mark.unit
class TestHealthCheckUrl:
    """Health check URL derivation."""

    def test_plain_host_with_port(self):
        assert build_health_check_url("myhost", 8080, "health") == "http://myhost:8080/health"

    def test_https_address_without_port(self):
        assert build_health_check_url("https://myhost", 0, "health") == "https://myhost/health"

    def test_scheme_detection_is_case_insensitive(self):
        assert build_health_check_url("HTTP://myhost", 80, "ping") == "HTTP://myhost:80/ping"

    def test_built_check_url(self):
        settings = ConsulSettings(
            enabled=True,
            address="https://myhost",
            port=0,
            ping_enabled=True,
            ping_endpoint="health",
        )

        assert build_registration(settings).check.http == "https://myhost/health"
