"""Prometheus metrics for agent calls and discovery queries.

All series live on the service ``REGISTRY`` served at ``GET /metrics``.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

from consul_discovery.infra.metrics.prometheus import DEFAULT_LATENCY_BUCKETS, REGISTRY

service_discovery_registrations_total = Counter(
    "service_discovery_registrations_total",
    "PUT /v1/agent/service/register calls by outcome.",
    ["status"],  # success | failure
    registry=REGISTRY,
)

service_discovery_deregistrations_total = Counter(
    "service_discovery_deregistrations_total",
    "PUT /v1/agent/service/deregister calls by outcome.",
    ["status"],  # success | failure
    registry=REGISTRY,
)

service_discovery_queries_total = Counter(
    "service_discovery_queries_total",
    "get_json calls by result; 'miss' is a non-2xx answer returned as the default.",
    ["result"],  # hit | miss | decode_error | transport_error
    registry=REGISTRY,
)

service_discovery_errors_total = Counter(
    "service_discovery_errors_total",
    "Failed agent calls by operation and failure kind.",
    ["operation", "error_type"],  # error_type: timeout | connection | http_error
    registry=REGISTRY,
)

service_discovery_operation_duration_seconds = Histogram(
    "service_discovery_operation_duration_seconds",
    "Round-trip time of agent calls and queries.",
    ["operation"],  # register | deregister | query
    buckets=DEFAULT_LATENCY_BUCKETS,
    registry=REGISTRY,
)
