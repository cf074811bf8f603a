"""Request ID context for tracing health requests.

Every HTTP request that hits the health endpoints gets a request ID. It is
stored in a ContextVar, so it follows the request across awaits and into
the worker threads that run the checkers (asyncio.to_thread copies the
current context).

Usage:
    from ops_health.observability.context import (
        set_request_id,
        get_request_id,
        request_id_context,
    )

    # At the request boundary
    req_id = set_request_id()  # Generates UUID if not provided

    # Retrieve anywhere in the call stack
    current_id = get_request_id()

    # Scoped request ID, previous value restored on exit
    with request_id_context("probe-123"):
        await status.check()
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Generator, Optional

_request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def set_request_id(req_id: Optional[str] = None) -> str:
    """Set the request ID for the current context.

    Args:
        req_id: Optional request ID. If None, generates a UUID4.

    Returns:
        The request ID that was set.
    """
    if req_id is None:
        req_id = str(uuid.uuid4())

    _request_id_var.set(req_id)
    return req_id


def get_request_id() -> Optional[str]:
    """Get the current request ID, or None if not set."""
    return _request_id_var.get()


def clear_request_id() -> None:
    """Clear the current request ID."""
    _request_id_var.set(None)


@contextmanager
def request_id_context(req_id: Optional[str] = None) -> Generator[str, None, None]:
    """Context manager for scoped request IDs.

    Sets the request ID on entry and restores the previous value on exit.

    Args:
        req_id: Optional request ID. If None, generates a UUID4.

    Yields:
        The request ID used inside the block.
    """
    if req_id is None:
        req_id = str(uuid.uuid4())

    token = _request_id_var.set(req_id)
    try:
        yield req_id
    finally:
        _request_id_var.reset(token)
