# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Structured logging configuration.

Uses structlog on top of the stdlib logging module so that library loggers
(uvicorn, sqlalchemy) and application loggers share one JSON output stream.
"""

import logging
import re
import sys
from typing import Any, Literal, TextIO

import structlog
from structlog.types import Processor

from .config import get_settings


class SensitiveDataMasker:
    """Processor to mask sensitive data in log output."""

    def __init__(self, patterns: list[str], mask_value: str = "[REDACTED]"):
        self.patterns = [re.compile(p, re.IGNORECASE) for p in patterns]
        self.mask_value = mask_value

    def __call__(
        self, logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        """Mask sensitive values in the event dict."""
        return self._mask_dict(event_dict)

    def _mask_dict(self, d: dict[str, Any]) -> dict[str, Any]:
        """Recursively mask sensitive keys in a dict."""
        result = {}
        for key, value in d.items():
            if any(pattern.search(key) for pattern in self.patterns):
                result[key] = self.mask_value
            elif isinstance(value, dict):
                result[key] = self._mask_dict(value)
            else:
                result[key] = value
        return result


def add_app_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add application context to all log entries."""
    settings = get_settings()
    event_dict.setdefault("environment", settings.environment)
    if "component" not in event_dict:
        event_dict["component"] = settings.app_name
    return event_dict


def configure_logging(
    log_level: str | None = None,
    log_format: Literal["json", "text"] | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure structured logging for the application.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format ("json" for production, "text" for development)
        stream: Output stream (stdout by default)
    """
    settings = get_settings()
    level = (log_level or settings.log_level).upper()
    fmt = log_format or settings.log_format

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level, logging.INFO))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)

    # Reduce noise from chatty libraries
    for logger_name in ("asyncio", "aiosqlite", "sqlalchemy.engine", "httpx", "httpcore"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        add_app_context,
    ]

    if settings.log_masking_enabled:
        shared_processors.append(SensitiveDataMasker(settings.log_masking_patterns_list))

    if fmt == "json":
        processors = shared_processors + [structlog.processors.JSONRenderer()]
    else:
        processors = shared_processors + [structlog.dev.ConsoleRenderer(colors=True)]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Example:
        logger = get_logger(__name__)
        logger.info("Feature enabled", tenant_id="acme", vendor="hiveit")
    """
    return structlog.get_logger(name)


def bind_context(**kwargs) -> None:
    """Bind context variables to all subsequent log messages.

    Example:
        bind_context(tenant_id="acme")
        logger.info("Processing")  # Will include tenant_id
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
