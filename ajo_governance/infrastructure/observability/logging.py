"""Structured logging configuration with structlog.

Production output is one JSON object per line; development output is a
colored console rendering. Both carry the same fields:

    {
        "timestamp": "2026-01-01T00:00:00.000000Z",
        "level": "info",
        "event": "vote_sequenced",
        "correlation_id": "uuid",
        "proposal_id": 7,
        ...
    }

Usage:
    configure_structlog(environment="production")

    log = structlog.get_logger()
    log.info("event_name", key="value")
"""

import logging
import os
from typing import cast

import structlog
from structlog.typing import Processor

from ajo_governance.infrastructure.observability.correlation import (
    correlation_id_processor,
)

LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"


def _get_log_level() -> int:
    """Get the configured log level from environment."""
    level_name = os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
    return getattr(logging, level_name, logging.INFO)


def build_processors(environment: str = "production") -> list[Processor]:
    """Return the processor chain for an environment.

    Args:
        environment: 'production' for JSON output, anything else for console.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        cast(Processor, correlation_id_processor),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if environment == "production":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    return processors


def configure_structlog(environment: str = "production") -> None:
    """Configure structlog for the process.

    Should be called once at startup. The level comes from LOG_LEVEL.

    Args:
        environment: 'production' for JSON output, 'development' for console.
    """
    structlog.configure(
        processors=build_processors(environment),
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger_for_service(
    service_name: str, component: str = "vote_protocol"
) -> structlog.BoundLogger:
    """Get a logger with service and component already bound.

    Binding builds a concrete logger from the configuration in force at
    call time, so call this when an instance is created, not at import.

    Args:
        service_name: The name of the service (typically class name).
        component: The component type.
    """
    return structlog.get_logger().bind(
        service=service_name,
        component=component,
    )
