"""Structured logging for the ops endpoints.

Every entry is tagged with the ID of the HTTP request being served, so the
log lines of one /health call (including those written by checkers on
worker threads) can be grouped together.

Usage:
    from ops_health.observability.logging import configure_logging, get_logger

    configure_logging(level="INFO")

    logger = get_logger("health_server")
    logger.info("health_server_starting", host="0.0.0.0", port=3000)
    # {"event": "health_server_starting", "host": "0.0.0.0", "port": 3000,
    #  "request_id": "none", "component": "health_server", ...}
"""

import logging
import sys
from typing import Any, List, Optional

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from ops_health.observability.context import get_request_id

NO_REQUEST_ID = "none"


def add_request_id_processor(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Tag the entry with the current request ID, or "none" outside a request."""
    event_dict["request_id"] = get_request_id() or NO_REQUEST_ID
    return event_dict


def build_processors(json_output: bool = True, add_timestamp: bool = True) -> List[Processor]:
    """Processor chain used by configure_logging.

    The renderer is always last: JSON for log shippers, colored key/value
    output for a terminal.
    """
    chain: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_request_id_processor,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if add_timestamp:
        chain.append(structlog.processors.TimeStamper(fmt="iso"))

    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=True)
    )
    chain.append(renderer)
    return chain


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    add_timestamp: bool = True,
) -> None:
    """Configure structlog for the process.

    Args:
        level: Minimum level name; unknown names fall back to INFO
        json_output: Render JSON lines instead of console output
        add_timestamp: Add an ISO timestamp to each entry
    """
    min_level = logging.getLevelName(level.upper())
    if not isinstance(min_level, int):
        min_level = logging.INFO

    structlog.configure(
        processors=build_processors(json_output, add_timestamp),
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(component: Optional[str] = None, **initial_context: Any) -> Any:
    """Return a logger bound to ``component`` and any extra context."""
    if component:
        initial_context["component"] = component
    logger = structlog.get_logger()
    return logger.bind(**initial_context) if initial_context else logger


def bind_context(**context: Any) -> None:
    """Bind context to every entry logged from the current context."""
    structlog.contextvars.bind_contextvars(**context)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
