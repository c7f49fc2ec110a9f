"""Structured logging configuration using structlog.

Provides JSON-formatted logs for production and colored console
output for development. Every event carries the application name,
version and environment, the component that emitted it, and the
authenticated vendor when a request has one.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from cotador.core.config import get_settings

# Package layers whose next module name is the component (cotador.services.cart.manager -> cart)
_LAYERS = frozenset({"api", "core", "db", "services"})


def add_app_context(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add application context to log events."""
    settings = get_settings()
    event_dict["app"] = settings.app_name
    event_dict["version"] = settings.app_version
    event_dict["environment"] = settings.environment
    return event_dict


def component_for(logger_name: str | None) -> str | None:
    """Short component name for a ``cotador.*`` logger, None for third-party loggers."""
    if not logger_name:
        return None
    parts = logger_name.split(".")
    if parts[0] != "cotador" or len(parts) < 2:
        return None
    if parts[1] in _LAYERS and len(parts) > 2:
        return parts[2]
    return parts[1]


def add_component(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag events from this package with the component that emitted them."""
    component = component_for(event_dict.get("logger"))
    if component is not None:
        event_dict.setdefault("component", component)
    return event_dict


def bind_vendor_context(vendor_id: int) -> None:
    """Attach the authenticated vendor to every event logged for this request."""
    structlog.contextvars.bind_contextvars(vendor_id=vendor_id)


def setup_logging() -> None:
    """Configure structured logging for the application."""
    settings = get_settings()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_component,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_app_context,
    ]

    if settings.debug:
        processors: list[Processor] = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
    )

    # Access logs and HTTP client chatter are noise next to the catalog and cart events
    for name in ("uvicorn.access", "httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
