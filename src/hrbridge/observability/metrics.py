"""Prometheus metrics for hrbridge observability.

This module provides Prometheus metrics for monitoring:
- Employee synchronization outcomes per provider
- Workforce API requests (latency, outcome)
- OAuth2 token acquisition (cache hits, failures, open circuit)
- HTTP requests served by the adapter
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram, generate_latest

if TYPE_CHECKING:
    from collections.abc import Generator

__all__ = [
    "EMPLOYEE_SYNC_COUNT",
    "REMOTE_REQUEST_DURATION",
    "REMOTE_REQUEST_COUNT",
    "OAUTH_TOKEN_REQUESTS",
    "HTTP_REQUEST_DURATION",
    "HTTP_REQUEST_COUNT",
    "observe_remote_request",
    "record_employee_sync",
    "record_token_request",
    "record_http_request",
    "get_metrics",
]

PREFIX = "hrbridge"

LATENCY_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0)

# ============================================================================
# Synchronization Metrics
# ============================================================================

EMPLOYEE_SYNC_COUNT = Counter(
    f"{PREFIX}_employee_sync_total",
    "Employee synchronizations by provider, action and outcome",
    ["provider", "action", "outcome"],
)

# ============================================================================
# Workforce API Metrics
# ============================================================================

REMOTE_REQUEST_DURATION = Histogram(
    f"{PREFIX}_remote_request_duration_seconds",
    "Workforce API request latency",
    ["operation"],
    buckets=LATENCY_BUCKETS,
)

REMOTE_REQUEST_COUNT = Counter(
    f"{PREFIX}_remote_request_total",
    "Workforce API requests by operation and outcome",
    ["operation", "outcome"],
)

OAUTH_TOKEN_REQUESTS = Counter(
    f"{PREFIX}_oauth_token_requests_total",
    "Access token lookups (success, failure, cache_hit, circuit_open)",
    ["outcome"],
)

# ============================================================================
# HTTP Metrics
# ============================================================================

HTTP_REQUEST_DURATION = Histogram(
    f"{PREFIX}_http_request_duration_seconds",
    "HTTP request latency",
    ["method", "route", "status_code"],
    buckets=LATENCY_BUCKETS,
)

HTTP_REQUEST_COUNT = Counter(
    f"{PREFIX}_http_requests_total",
    "Total HTTP requests",
    ["method", "route", "status_code"],
)


def get_metrics(registry: CollectorRegistry | None = None) -> bytes:
    """Get current metrics in Prometheus format."""
    return generate_latest(registry or REGISTRY)


# ============================================================================
# Convenience Functions for Recording Metrics
# ============================================================================


@contextmanager
def observe_remote_request(operation: str) -> Generator[dict[str, Any], None, None]:
    """Context manager timing a workforce API call.

    Set ``context["outcome"]`` inside the block; it defaults to
    ``success`` and becomes ``error`` if the block raises.

    Args:
        operation: create, update or get
    """
    context: dict[str, Any] = {"outcome": "success"}
    start_time = time.perf_counter()

    try:
        yield context
    except Exception:
        context["outcome"] = "error"
        raise
    finally:
        REMOTE_REQUEST_DURATION.labels(operation=operation).observe(
            time.perf_counter() - start_time
        )
        REMOTE_REQUEST_COUNT.labels(operation=operation, outcome=context["outcome"]).inc()


def record_employee_sync(provider: str, action: str, outcome: str) -> None:
    """Record one synchronization attempt.

    Args:
        provider: Provider value
        action: create or update
        outcome: success or failure
    """
    EMPLOYEE_SYNC_COUNT.labels(provider=provider, action=action, outcome=outcome).inc()


def record_token_request(outcome: str) -> None:
    """Record an access token lookup outcome."""
    OAUTH_TOKEN_REQUESTS.labels(outcome=outcome).inc()


def record_http_request(method: str, route: str, status_code: int, duration_seconds: float) -> None:
    """Record a served HTTP request."""
    labels = {"method": method, "route": route, "status_code": str(status_code)}
    HTTP_REQUEST_COUNT.labels(**labels).inc()
    HTTP_REQUEST_DURATION.labels(**labels).observe(duration_seconds)
