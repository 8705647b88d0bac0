"""
Observability module.

Provides logging configuration, structured logging helpers, correlation ID
tracking and HTTP request logging middleware.
"""

from prelude.observability.correlation import get_correlation_id, set_correlation_id
from prelude.observability.logger import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "get_correlation_id",
    "set_correlation_id",
]
