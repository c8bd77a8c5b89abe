"""
Structured Logging with Structlog.

JSON logs on stdout, one event name per line plus keyword context. Request
scoped values (request_id) are carried through contextvars.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.contextvars import bound_contextvars
from structlog.types import EventDict, Processor

from boost_billing.config import settings

# Context keys whose values must never reach a log sink
REDACTED_KEYS = frozenset(
    {"api_key", "stripe_secret_key", "webhook_secret", "signature", "stripe_signature", "password"}
)


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["service"] = settings.service_name
    event_dict["version"] = settings.api_version
    return event_dict


def redact_secrets(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask credential-like values that were passed as log context."""
    for key in REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = "[redacted]"
    return event_dict


def setup_logging() -> None:
    """
    Configure structlog on top of stdlib logging.

    Example JSON line:
        {"event": "entitlement_transition_applied", "level": "info",
         "logger": "boost_billing.services.entitlements", "kind": "subscription_deleted",
         "rows_affected": 1, "request_id": "req-123", "service": "boost-billing-api", ...}
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_app_context,
        redact_secrets,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    renderer: Processor
    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    processors.append(renderer)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    return structlog.get_logger(name)


def log_context(**values: Any) -> Any:
    """
    Bind values to every log line emitted inside the block.

    Usage:
        with log_context(request_id="req-123"):
            logger.info("processing_request")
    """
    return bound_contextvars(**values)
