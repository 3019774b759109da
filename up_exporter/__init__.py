"""Prometheus exporter for the Up banking API."""

__version__ = "1.0.0"
