"""Consul service discovery integration for FastAPI applications."""

__version__ = "1.0.0"
