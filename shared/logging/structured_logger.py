"""Structured logging configuration using structlog.

Every service log line is one event name plus key/value context. Request
middleware binds a correlation id through ``bind_context`` and the process
binds service and environment once at startup.

Events must never carry credentials: ``mask_secrets`` replaces password and
token values before rendering.
"""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

MASKED = "***"
SECRET_KEYS = frozenset({"password", "access_token", "token", "authorization"})


def mask_secrets(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Replace values of credential-bearing keys.

    Args:
        logger: The logger instance
        method_name: The logging method name
        event_dict: The event dictionary

    Returns:
        Event dictionary with secrets masked
    """
    for key in SECRET_KEYS.intersection(event_dict):
        event_dict[key] = MASKED
    return event_dict


def build_processors(json_logs: bool) -> list[Processor]:
    """Processor chain, ending in the JSON or console renderer."""
    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        mask_secrets,
        structlog.processors.format_exc_info,
        renderer,
    ]


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    service_name: Optional[str] = None,
    environment: Optional[str] = None,
) -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: JSON output when true, console output otherwise
        service_name: Bound as ``service`` on every event
        environment: Bound as ``environment`` on every event
    """
    structlog.configure(
        processors=build_processors(json_logs),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    static_context = {"service": service_name, "environment": environment}
    bind_context(**{key: value for key, value in static_context.items() if value})


def bind_context(**kwargs: Any) -> None:
    """Bind context variables to all subsequent log entries in this context.

    Args:
        **kwargs: Context key-value pairs to bind
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)
