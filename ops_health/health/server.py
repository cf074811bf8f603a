"""FastAPI exposition layer for a Status.

Provides HTTP endpoints for:
- /about - Service metadata (name, description, owners, links, revision)
- /metrics - Prometheus metrics in text format
- /ready - Readiness probe
- /health - Aggregated health of all checkers

Usage:
    # Standalone server
    from ops_health.health.server import run_health_server
    run_health_server(status, address="0.0.0.0:3000")

    # Mount into an existing app, under /__ like the ops convention
    from ops_health.health.server import create_health_router
    app.include_router(create_health_router(status, prefix="/__"))
"""

import asyncio
import json
from contextlib import asynccontextmanager
from typing import Any, Callable, Optional

from fastapi import FastAPI, Request, Response, status as http_status
from fastapi.responses import PlainTextResponse
from fastapi.routing import APIRouter
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
import structlog

from ops_health.health.status import Status, StatusNoChecks, StatusWithChecks
from ops_health.observability.context import request_id_context
from ops_health.observability.metrics import CONTENT_TYPE, HealthMetrics
from ops_health.utils.address import parse_address
from ops_health.utils.exceptions import (
    MetricsError,
    OpsError,
    SerializationError,
    TransportError,
)

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"
JSON_MEDIA_TYPE = "application/json"


def render_json(payload: Any) -> bytes:
    """Serialize a payload for a JSON response.

    Raises:
        SerializationError: If the payload cannot be encoded
    """
    try:
        return json.dumps(payload).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError.wrap(e) from e


def error_response(err: OpsError) -> Response:
    """Turn an OpsError into a 500 plain-text response."""
    logger.error("ops_request_failed", kind=err.kind.value, error=str(err))
    return PlainTextResponse(
        content=str(err),
        status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tags every request with a request ID.

    Honours an incoming X-Request-ID header and echoes the ID back.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        with request_id_context(request.headers.get(REQUEST_ID_HEADER)) as req_id:
            response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = req_id
        return response


def create_health_router(
    status: Status,
    metrics: Optional[HealthMetrics] = None,
    prefix: str = "",
) -> APIRouter:
    """Create a router exposing ``status``.

    Args:
        status: Status to serve
        metrics: Metrics sink shared with the status and rendered by
            /metrics (default: the status's own sink, or an empty one)
        prefix: Path prefix, e.g. "/__"

    Returns:
        APIRouter with the four ops endpoints
    """
    if metrics is not None and metrics is not status.metrics:
        if isinstance(status, (StatusNoChecks, StatusWithChecks)):
            status = status.with_metrics(metrics)
        elif status.metrics is not None:
            raise MetricsError(
                f"{type(status).__name__} writes to a different metrics sink"
            )
    sink = metrics or status.metrics or HealthMetrics()
    router = APIRouter(prefix=prefix)

    @router.get(
        "/about",
        response_model=None,
        summary="Service metadata",
        description="Name, description, owners, links and build revision",
    )
    async def about() -> Response:
        try:
            payload = render_json(status.about())
        except OpsError as e:
            return error_response(e)
        return Response(content=payload, media_type=JSON_MEDIA_TYPE)

    @router.get(
        "/metrics",
        response_model=None,
        summary="Prometheus metrics",
        description="Export Prometheus metrics in text format",
    )
    async def prometheus_metrics() -> Response:
        try:
            body = sink.render()
        except OpsError as e:
            return error_response(e)
        return Response(content=body, media_type=CONTENT_TYPE)

    @router.get(
        "/ready",
        response_model=None,
        summary="Readiness probe",
        description="Check if service is ready to accept traffic",
        responses={
            200: {"description": "Service is ready"},
            404: {"description": "Service has no concept of readiness"},
            503: {"description": "Service is not ready"},
        },
    )
    async def readiness_probe() -> Response:
        is_ready = await status.ready()

        if is_ready is None:
            return PlainTextResponse(
                "not found", status_code=http_status.HTTP_404_NOT_FOUND
            )
        if is_ready:
            return PlainTextResponse("ready\n", status_code=http_status.HTTP_200_OK)
        return PlainTextResponse(
            "Service unavailable",
            status_code=http_status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    @router.get(
        "/health",
        response_model=None,
        summary="Full health check",
        description="Run all health checks and return detailed status",
        responses={
            200: {"description": "Checks ran, see the health field"},
            404: {"description": "No health checks configured"},
        },
    )
    async def health_check() -> Response:
        result = await status.check()

        if result is None:
            return PlainTextResponse(
                "No health checks", status_code=http_status.HTTP_404_NOT_FOUND
            )
        try:
            payload = render_json(result.to_dict())
        except OpsError as e:
            return error_response(e)
        return Response(content=payload, media_type=JSON_MEDIA_TYPE)

    return router


def create_health_app(
    status: Status,
    metrics: Optional[HealthMetrics] = None,
    prefix: str = "",
    title: str = "Ops Health API",
    version: str = "1.0.0",
) -> FastAPI:
    """Create a FastAPI application serving ``status``.

    Unknown paths answer 404 "not found" as plain text.

    Args:
        status: Status to serve
        metrics: Metrics sink rendered by /metrics
        prefix: Path prefix for the ops endpoints
        title: API title
        version: API version

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):  # pragma: no cover
        logger.info("health_app_started", status=repr(status))
        yield
        logger.info("health_app_stopped")

    app = FastAPI(
        title=title,
        version=version,
        description="Health, readiness and metrics endpoints",
        lifespan=lifespan,
    )
    app.add_middleware(RequestIdMiddleware)
    app.include_router(create_health_router(status, metrics=metrics, prefix=prefix))

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> Response:
        if exc.status_code == http_status.HTTP_404_NOT_FOUND:
            return PlainTextResponse("not found", status_code=exc.status_code)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    @app.exception_handler(OpsError)
    async def ops_error(request: Request, exc: OpsError) -> Response:
        return error_response(exc)

    return app


async def serve_health(
    status: Status,
    address: str = "0.0.0.0:3000",
    prefix: str = "",
    log_level: str = "info",
) -> None:
    """Serve ``status`` until the server is stopped.

    Raises:
        AddressParseError: If ``address`` is not ``host:port``
        TransportError: If the server cannot bind or fails while serving
    """
    import uvicorn

    host, port = parse_address(address)
    app = create_health_app(status, prefix=prefix)
    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level=log_level,
        access_log=True,
    )
    server = uvicorn.Server(config)

    logger.info("health_server_starting", host=host, port=port)
    try:
        await server.serve()
    except OSError as e:
        raise TransportError(f"health server failed on {address}: {e}") from e


def run_health_server(
    status: Status,
    address: str = "0.0.0.0:3000",
    prefix: str = "",
    log_level: str = "info",
) -> None:
    """Serve ``status`` (blocking).

    Args:
        status: Status to serve
        address: Bind address as ``host:port``
        prefix: Path prefix for the ops endpoints
        log_level: uvicorn log level
    """
    asyncio.run(
        serve_health(status, address=address, prefix=prefix, log_level=log_level)
    )
