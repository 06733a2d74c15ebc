"""
Structured logging for roadlines.

Every module obtains its logger through :func:`get_logger` and logs dotted
event names with keyword fields::

    logger = get_logger(__name__)
    logger.info("migration.applied", migration="001_create_users.sql")

:func:`configure_logging` is called once by the hosting application (the CLI
does it in its root callback).  Until then structlog's defaults apply, which
is what the test-suite relies on for ``structlog.testing.capture_logs``.

Output (JSON format)::

    {
      "@timestamp": "2026-10-19T10:00:00Z",
      "log.level": "info",
      "service.name": "roadlines",
      "logger": "roadlines.core.migrations.runner",
      "event": "migration.applied",
      "migration": "001_create_users.sql"
    }
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# Store service name for metadata
_SERVICE_NAME = "roadlines"


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def _elasticsearch_compatible(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Make field names ECS compatible."""
    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")
    if "level" in event_dict:
        event_dict["log.level"] = event_dict.pop("level")
    return event_dict


def _rename_logger_name(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    if "logger_name" in event_dict:
        event_dict["logger"] = event_dict.pop("logger_name")
    return event_dict


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    # sys.stderr is looked up per logger so redirected streams are honoured
    return structlog.PrintLogger(sys.stderr)


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "roadlines",
    stream: TextIO | None = None,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
        service: Service name to include in logs
        stream: Output stream, defaults to stderr so command output stays clean
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    out = stream or sys.stderr
    if json_format is None:
        json_format = not out.isatty()

    processors: list[Processor] = [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        _rename_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]

    if json_format:
        processors.append(_elasticsearch_compatible)
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=out.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream) if stream else _stderr_logger,
        cache_logger_on_first_use=False,
    )

    # Configure standard library logging too
    logging.basicConfig(
        format="%(message)s",
        stream=out,
        level=getattr(logging, level.upper()),
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``).

    The name travels as the ``logger_name`` initial value and is renamed to
    ``logger`` by :func:`_rename_logger_name` once logging is configured.
    """
    if name:
        return structlog.get_logger(logger_name=name)
    return structlog.get_logger()


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs.

    Example:
        bind_context(database="/data/roadlines.db")
        logger.info("database.ready")  # includes database
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


__all__ = [
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
]
