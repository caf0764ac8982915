"""Tests for logging configuration and the JSON formatter."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from consul_discovery.infra.logging.config import TEXT_FORMAT, build_logging_config
from consul_discovery.infra.logging.formatters import JSONFormatter


def make_record(msg: str = "Service registered with Consul", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="consul_discovery.infra.discovery.client",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.mark.unit
class TestJSONFormatter:
    """Test suite for JSONFormatter."""

    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "consul_discovery.infra.discovery.client"
        assert data["message"] == "Service registered with Consul"
        assert data["timestamp"].endswith("Z")

    def test_extra_and_static_fields(self):
        formatter = JSONFormatter(static={"service": "orders-service"})

        data = json.loads(formatter.format(make_record(service_id="orders-service:abc", port=5000)))

        assert data["service"] == "orders-service"
        assert data["service_id"] == "orders-service:abc"
        assert data["port"] == 5000
        assert "pathname" not in data

    def test_single_line_with_exception(self):
        try:
            raise RuntimeError("agent down")
        except RuntimeError:
            record = make_record()
            record.exc_info = sys.exc_info()

        output = JSONFormatter().format(record)

        assert "\n" not in output
        assert "agent down" in json.loads(output)["exception"]

    def test_process_info(self):
        data = json.loads(JSONFormatter(include_process_info=True).format(make_record()))

        assert "process_id" in data
        assert "process_name" in data

    def test_non_serializable_extra(self):
        data = json.loads(JSONFormatter().format(make_record(path=object())))

        assert data["path"].startswith("<object object")


@pytest.mark.unit
class TestBuildLoggingConfig:
    """Test suite for the dictConfig builder."""

    def test_json_formatter(self):
        config = build_logging_config("DEBUG", True, False, {"service": "orders"})

        formatter = config["formatters"]["default"]
        assert formatter["()"].endswith("JSONFormatter")
        assert formatter["static"] == {"service": "orders"}
        assert config["root"]["level"] == "DEBUG"

    def test_text_formatter(self):
        config = build_logging_config("INFO", False, False, None)

        assert config["formatters"]["default"] == {"format": TEXT_FORMAT}

    def test_http_client_loggers_quieted(self):
        config = build_logging_config("DEBUG", False, False, None)

        assert config["loggers"]["httpx"]["level"] == "WARNING"

    def test_http_client_level_override(self):
        config = build_logging_config("INFO", False, False, None, http_client_level="DEBUG")

        assert config["loggers"]["httpcore"]["level"] == "DEBUG"
