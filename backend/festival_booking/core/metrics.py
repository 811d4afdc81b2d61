"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at the /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_attempts = Counter(
    'booking_attempts_total',
    'Total booking attempts',
    ['outcome']  # success, or the error kind (SlotFull, AlreadyRegistered, ...)
)

booking_latency = Histogram(
    'booking_latency_seconds',
    'Booking allocation latency, validation through commit',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

# Transaction metrics
transaction_retries = Counter(
    'transaction_retry_attempts_total',
    'Transaction retries caused by concurrent writes',
    ['operation', 'reason']
)

admin_actions = Counter(
    'admin_actions_total',
    'Administrative state changes',
    ['action']
)

notification_failures = Counter(
    'notification_failures_total',
    'Notifications that could not be handed to the dispatcher'
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(outcome: str):
    booking_attempts.labels(outcome=outcome).inc()


def record_transaction_retry(operation: str, reason: str):
    transaction_retries.labels(operation=operation, reason=reason).inc()


def record_admin_action(action: str):
    admin_actions.labels(action=action).inc()


def record_cache_operation(operation: str, hit: bool):
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
