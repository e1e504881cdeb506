"""Structured logging for SchemaBase.

Every entry carries the service name, the environment and a correlation
ID. Request middleware binds the correlation ID per request; entries
logged outside a request get a fresh one. Development renders for the
console; everything else emits one JSON object per line.
"""

import logging
import sys
import uuid
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from schemabase.core.config import Settings, get_settings

# Third-party loggers routed through the stdlib root handler
_STDLIB_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "alembic")


def add_correlation_id(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Ensure the entry has a ``correlation_id``."""
    if "correlation_id" not in event_dict:
        event_dict["correlation_id"] = f"cid_{uuid.uuid4().hex[:12]}"
    return event_dict


def add_logger_name(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    # structlog.stdlib.add_logger_name needs a stdlib logger; PrintLogger has no name
    event_dict["logger"] = getattr(logger, "name", None) or "schemabase"
    return event_dict


def service_context(settings: Settings) -> Processor:
    """Build a processor stamping the service name and environment."""
    service = settings.app_name
    environment = settings.environment

    def add_service_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service)
        event_dict.setdefault("environment", environment)
        return event_dict

    return add_service_context


def rename_message_field(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename ``event`` to ``message`` in JSON entries."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def _renderers(settings: Settings) -> list[Processor]:
    if settings.uses_console_logs:
        return [
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            )
        ]
    return [
        structlog.processors.format_exc_info,
        rename_message_field,
        structlog.processors.JSONRenderer(),
    ]


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the stdlib loggers it shares stdout with.

    Args:
        settings: Optional settings instance. Loaded from environment if omitted.
    """
    if settings is None:
        settings = get_settings()

    level = getattr(logging, settings.log_level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        service_context(settings),
        add_correlation_id,
    ]

    structlog.configure(
        processors=processors + _renderers(settings),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=not settings.uses_console_logs,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for logger_name in _STDLIB_LOGGERS:
        logging.getLogger(logger_name).setLevel(level)

    # echo=True already prints statements; keep the engine logger quiet otherwise
    if not settings.db_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structured logger, named ``schemabase`` when no name is given."""
    return structlog.get_logger(name or "schemabase")


def bind_correlation_id(correlation_id: str) -> None:
    """Attach a correlation ID to every entry logged in the current context."""
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def clear_context() -> None:
    """Drop everything bound to the current logging context."""
    structlog.contextvars.clear_contextvars()
