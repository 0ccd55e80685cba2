"""
Structured logging setup.

structlog loggers and the standard library module loggers (handlers, bridge,
auth, registry, streams) share one pipeline: records from both end up in a
single stdout handler whose ProcessorFormatter adds the level, timestamp and
current request id before rendering JSON or console output.
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

import structlog

from readwise_mcp.config.loader import Settings

# Context variable for request ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

_handler: logging.Handler | None = None


def get_request_id() -> str:
    """Get the current request ID."""
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """Set the request ID for the current context."""
    if request_id is None:
        request_id = str(uuid.uuid4())[:8]
    request_id_var.set(request_id)
    return request_id


def add_request_id(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add request ID to log records."""
    request_id = get_request_id()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


# Run for structlog events and for stdlib records alike
SHARED_PROCESSORS: list[Any] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    add_request_id,
]


def build_formatter(log_format: str) -> structlog.stdlib.ProcessorFormatter:
    """Formatter rendering every record as JSON, or for the console otherwise."""
    if log_format == "json":
        rendering = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        rendering = [structlog.dev.ConsoleRenderer(colors=True)]

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=SHARED_PROCESSORS,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *rendering],
    )


def setup_logging(settings: Settings) -> None:
    """
    Set up structured logging.

    Safe to call more than once: the handler installed by a previous call
    is replaced, other root handlers are left alone.
    """
    global _handler

    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(settings.log_format))

    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)
    root.addHandler(handler)
    root.setLevel(level)
    _handler = handler


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger."""
    return structlog.get_logger(name)
