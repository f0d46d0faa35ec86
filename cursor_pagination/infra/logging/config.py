"""Logging configuration setup.

The library itself only emits records through module loggers; applications
embedding it may call ``setup_logging()`` once at startup to get console
output in either plain text or JSON Lines.
"""

from __future__ import annotations

import logging
import logging.config
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from cursor_pagination.core.settings.logs import LoggingSettings

_LOGGING_INITIALIZED = False

PLAIN_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def build_logging_config(log_settings: LoggingSettings) -> dict[str, Any]:
    """Build a ``dictConfig`` mapping from logging settings.

    Args:
        log_settings: Logging settings instance.

    Returns:
        Configuration dictionary for ``logging.config.dictConfig``.
    """
    if log_settings.json_logs:
        formatter: dict[str, Any] = {
            "()": "cursor_pagination.infra.logging.formatters.JSONFormatter",
            "static": {"service": log_settings.service_name},
        }
    else:
        formatter = {"format": PLAIN_FORMAT}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": formatter},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stderr",
            },
        },
        "root": {"level": log_settings.level, "handlers": ["console"]},
    }


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    if log_settings is None:
        from cursor_pagination.core.settings import get_logging_settings

        log_settings = get_logging_settings()

    logging.config.dictConfig(build_logging_config(log_settings))
    _LOGGING_INITIALIZED = True
    logging.getLogger(__name__).debug(
        "Logging configured",
        extra={"log_level": log_settings.level, "json_logs": log_settings.json_logs},
    )


__all__ = ["build_logging_config", "setup_logging"]
