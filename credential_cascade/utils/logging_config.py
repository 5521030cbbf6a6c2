"""
Logging configuration using structlog for structured, JSON-based logging.

Logs are written to stderr: stdout carries the credential protocol when the
cascade runs as a helper for git. Password values never reach the output.
"""

import sys
from typing import Any

import structlog

# Event keys whose values are replaced before rendering
SECRET_KEYS = frozenset({"password"})

REDACTED = "<redacted>"


def redact_secrets(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Replace secret values in an event.

    A ``Context`` logged under ``context`` is rendered as a mapping with its
    password hidden.
    """
    for key in SECRET_KEYS.intersection(event_dict):
        if event_dict[key] is not None:
            event_dict[key] = REDACTED

    context = event_dict.get("context")
    if hasattr(context, "redacted"):
        event_dict["context"] = context.redacted().model_dump(exclude_none=True)

    return event_dict


def configure_logging(log_level: str = "WARNING") -> None:
    """Configure structured logging with JSON output on stderr.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            redact_secrets,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
