"""Logging infrastructure.

Basic usage:
    import logging

    from cursor_pagination.infra.logging import get_lazy_logger, setup_logging

    setup_logging()  # once, at application startup

    logger = get_lazy_logger(__name__)
    logger.debug("Decoded payload: %s", lambda: expensive_dump())
"""

from cursor_pagination.infra.logging.config import build_logging_config, setup_logging
from cursor_pagination.infra.logging.formatters import JSONFormatter
from cursor_pagination.infra.logging.lazy import LazyLoggerAdapter, get_lazy_logger

__all__ = [
    "JSONFormatter",
    "LazyLoggerAdapter",
    "build_logging_config",
    "get_lazy_logger",
    "setup_logging",
]
