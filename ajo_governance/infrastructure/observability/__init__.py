"""Structured logging and correlation for the vote protocol.

Usage:
    from ajo_governance.infrastructure.observability import configure_structlog

    configure_structlog(environment="production")
"""

from ajo_governance.infrastructure.observability.correlation import (
    correlation_id_processor,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from ajo_governance.infrastructure.observability.logging import (
    build_processors,
    configure_structlog,
    get_logger_for_service,
)

__all__: list[str] = [
    "build_processors",
    "configure_structlog",
    "correlation_id_processor",
    "generate_correlation_id",
    "get_correlation_id",
    "get_logger_for_service",
    "set_correlation_id",
]
