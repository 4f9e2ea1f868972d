"""Observability: Prometheus metrics."""

from hrbridge.observability.metrics import (
    get_metrics,
    observe_remote_request,
    record_employee_sync,
    record_http_request,
    record_token_request,
)

__all__ = [
    "get_metrics",
    "observe_remote_request",
    "record_employee_sync",
    "record_http_request",
    "record_token_request",
]
