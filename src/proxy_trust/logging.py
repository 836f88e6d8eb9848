"""Structured logging configuration for the proxy trust filter.

JSON-formatted output in production, readable console output in
development. Trust decisions are logged as discrete events so rejected
forwarding chains can be traced during incident response.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add component context to all log entries."""
    event_dict.setdefault("component", "proxy-trust")
    return event_dict


def configure_logging(env: str = "development") -> None:
    """Configure structured logging.

    - Development: Human-readable console output
    - Anything else: JSON-formatted logs for aggregation

    Args:
        env: Deployment environment name
    """
    log_level = logging.DEBUG if env == "development" else logging.INFO

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if env == "development":
        processors = [*shared_processors, structlog.dev.ConsoleRenderer(colors=True)]
    else:
        processors = [*shared_processors, structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Structured logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.warning("untrusted_proxy_rejected", hop="10.0.0.9")
    """
    return structlog.get_logger(name)
