"""Metrics module."""

from .collector import (
    PROPAGATION_CEILING_MS,
    IMetricsCollector,
    MetricsCollector,
    percentile,
)

__all__ = [
    "IMetricsCollector",
    "MetricsCollector",
    "PROPAGATION_CEILING_MS",
    "percentile",
]
