"""
Observability module - Logging, Metrics, and Tracing.
"""

from boost_billing.observability.logging import get_logger, log_context, setup_logging
from boost_billing.observability.metrics import metrics
from boost_billing.observability.tracing import setup_tracing

__all__ = [
    "get_logger",
    "log_context",
    "setup_logging",
    "metrics",
    "setup_tracing",
]
