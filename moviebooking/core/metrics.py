"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_attempts = Counter(
    'booking_attempts_total',
    'Total booking attempts',
    ['status']  # success, invalid, not_found, conflict, error
)

booking_latency = Histogram(
    'booking_latency_seconds',
    'Booking request latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

booking_cancellations = Counter(
    'booking_cancellations_total',
    'Bookings moved to CANCELLED'
)

# Show lock metrics
show_lock_wait = Histogram(
    'show_lock_wait_seconds',
    'Time spent waiting for the per-show lock',
    buckets=[0.0001, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0]
)

show_lock_failures = Counter(
    'show_lock_failures_total',
    'Per-show lock acquisition failures',
    ['reason']  # timeout, backend_error
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(status: str):
    """Record booking attempt. Status: success, invalid, not_found, conflict, error"""
    booking_attempts.labels(status=status).inc()


def record_lock_failure(reason: str):
    show_lock_failures.labels(reason=reason).inc()
