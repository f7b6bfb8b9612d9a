"""Prometheus metrics for codec operations."""
from __future__ import annotations

from typing import Final

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

_OPERATIONS_TOTAL: Final = Counter(
    "khqr_operations_total",
    "Total codec operations",
    labelnames=("operation", "outcome"),
)
_OPERATION_LATENCY: Final = Histogram(
    "khqr_operation_duration_seconds",
    "Latency of codec operations",
    labelnames=("operation",),
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.05, 0.1),
)
_OPERATION_ERRORS_TOTAL: Final = Counter(
    "khqr_operation_errors_total",
    "Codec errors by code",
    labelnames=("operation", "code"),
)


def observe_operation(operation: str, outcome: str, duration_ms: float) -> None:
    _OPERATIONS_TOTAL.labels(operation=operation, outcome=outcome).inc()
    _OPERATION_LATENCY.labels(operation=operation).observe(duration_ms / 1000)


def record_codec_error(code: str, operation: str) -> None:
    _OPERATION_ERRORS_TOTAL.labels(operation=operation, code=code).inc()


def metrics_payload() -> tuple[bytes, str]:
    """Return Prometheus exposition payload and content type."""

    return generate_latest(), CONTENT_TYPE_LATEST
