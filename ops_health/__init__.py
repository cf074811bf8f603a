"""Ops health: standard health, readiness and metrics endpoints for a service.

Usage:
    from ops_health import CheckResponse, Checker, NamedChecker, StatusBuilder
    from ops_health import run_health_server

    class NoopChecker(Checker):
        def check(self) -> CheckResponse:
            return CheckResponse.healthy("noop is always healthy")

    status = (
        StatusBuilder.healthchecks("example", "An example app with an ops server")
        .checker(NamedChecker("noop", NoopChecker()))
        .revision("12561012a04f945852cf0171da516a9ffc709e76")
    )

    run_health_server(status, address="0.0.0.0:3000")
"""

from ops_health.health import (
    CheckResponse,
    Checker,
    DirectoryChecker,
    DiskSpaceChecker,
    FunctionChecker,
    Health,
    HealthResult,
    NamedChecker,
    NoopChecker,
    Status,
    StatusBuilder,
    StatusNoChecks,
    StatusWithChecks,
    create_health_app,
    create_health_router,
    run_health_server,
    serve_health,
)
from ops_health.observability.metrics import HealthMetrics
from ops_health.utils.exceptions import OpsError

__version__ = "0.1.0"

__all__ = [
    "CheckResponse",
    "Checker",
    "DirectoryChecker",
    "DiskSpaceChecker",
    "FunctionChecker",
    "Health",
    "HealthMetrics",
    "HealthResult",
    "NamedChecker",
    "NoopChecker",
    "OpsError",
    "Status",
    "StatusBuilder",
    "StatusNoChecks",
    "StatusWithChecks",
    "create_health_app",
    "create_health_router",
    "run_health_server",
    "serve_health",
]
