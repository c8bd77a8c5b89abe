"""
Metrics Collection with Prometheus.

Exposes webhook, session and store metrics for monitoring.
"""

from enum import Enum

from prometheus_client import Counter, Gauge, Histogram, Info

from boost_billing.config import settings


class MetricLabels(str, Enum):
    """Standard metric label names."""

    ENDPOINT = "endpoint"
    METHOD = "method"
    STATUS_CODE = "status_code"
    OPERATION = "operation"
    EVENT_TYPE = "event_type"
    ERROR_TYPE = "error_type"


class BoostMetrics:
    """
    Centralized metrics for the Boost Billing API.

    Covers:
    - HTTP requests (rate, duration, in progress)
    - Webhook deliveries (by event type and outcome)
    - Entitlement transitions (by kind and resulting flag)
    - Checkout / portal session creation
    - Store operations (rate, duration)
    """

    def __init__(self) -> None:
        """Initialize all Prometheus metrics."""

        # ====================================================================
        # Service Info
        # ====================================================================
        self.service_info = Info(
            "boost_service",
            "Service information",
        )
        self.service_info.info(
            {
                "version": settings.api_version,
                "service_name": settings.service_name,
            }
        )

        # ====================================================================
        # HTTP Metrics
        # ====================================================================
        self.http_requests_total = Counter(
            "boost_http_requests_total",
            "Total HTTP requests",
            [MetricLabels.ENDPOINT, MetricLabels.METHOD, MetricLabels.STATUS_CODE],
        )

        self.http_request_duration_seconds = Histogram(
            "boost_http_request_duration_seconds",
            "HTTP request duration in seconds",
            [MetricLabels.ENDPOINT, MetricLabels.METHOD],
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
        )

        self.http_requests_in_progress = Gauge(
            "boost_http_requests_in_progress",
            "Number of HTTP requests currently being processed",
            [MetricLabels.ENDPOINT, MetricLabels.METHOD],
        )

        # ====================================================================
        # Webhook Metrics
        # ====================================================================
        self.webhook_events_total = Counter(
            "boost_webhook_events_total",
            "Webhook deliveries by event type and outcome",
            [MetricLabels.EVENT_TYPE, "outcome"],
        )

        self.entitlement_transitions_total = Counter(
            "boost_entitlement_transitions_total",
            "Entitlement transitions applied",
            ["kind", "boosted"],
        )

        # ====================================================================
        # Session Metrics
        # ====================================================================
        self.sessions_created_total = Counter(
            "boost_sessions_created_total",
            "Hosted checkout and portal sessions created",
            ["session_type", "success"],
        )

        # ====================================================================
        # Store Metrics
        # ====================================================================
        self.db_queries_total = Counter(
            "boost_db_queries_total",
            "Total store queries",
            [MetricLabels.OPERATION, "success"],
        )

        self.db_query_duration_seconds = Histogram(
            "boost_db_query_duration_seconds",
            "Store query duration in seconds",
            [MetricLabels.OPERATION],
            buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
        )

        # ====================================================================
        # Error Metrics
        # ====================================================================
        self.errors_total = Counter(
            "boost_errors_total",
            "Total errors by type",
            [MetricLabels.ERROR_TYPE, MetricLabels.OPERATION],
        )

    # ========================================================================
    # Helper Methods
    # ========================================================================

    def record_http_request(
        self, endpoint: str, method: str, status_code: int, duration: float
    ) -> None:
        """Record HTTP request metrics."""
        self.http_requests_total.labels(
            endpoint=endpoint, method=method, status_code=status_code
        ).inc()
        self.http_request_duration_seconds.labels(endpoint=endpoint, method=method).observe(
            duration
        )

    def record_webhook_event(self, event_type: str, outcome: str) -> None:
        """Record a webhook delivery outcome (processed, ignored, rejected, failed)."""
        self.webhook_events_total.labels(event_type=event_type, outcome=outcome).inc()

    def record_transition(self, kind: str, boosted: bool) -> None:
        """Record an applied entitlement transition."""
        self.entitlement_transitions_total.labels(kind=kind, boosted=str(boosted)).inc()

    def record_session(self, session_type: str, success: bool) -> None:
        """Record a checkout or portal session attempt."""
        self.sessions_created_total.labels(session_type=session_type, success=str(success)).inc()

    def record_db_query(self, operation: str, success: bool, duration: float) -> None:
        """Record store query metrics."""
        self.db_queries_total.labels(operation=operation, success=str(success)).inc()
        self.db_query_duration_seconds.labels(operation=operation).observe(duration)

    def record_error(self, error_type: str, operation: str) -> None:
        """Record error occurrence."""
        self.errors_total.labels(error_type=error_type, operation=operation).inc()


# Global metrics instance
metrics = BoostMetrics()
