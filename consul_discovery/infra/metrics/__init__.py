"""Prometheus metrics infrastructure."""

from consul_discovery.infra.metrics.prometheus import DEFAULT_LATENCY_BUCKETS, REGISTRY

__all__ = ["DEFAULT_LATENCY_BUCKETS", "REGISTRY"]
