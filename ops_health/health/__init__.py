"""Health checks, status aggregation and HTTP exposition.

Provides:
- Checker implementations and the Health/CheckResponse vocabulary
- StatusBuilder for statuses with and without checks
- FastAPI endpoints (/about, /health, /ready, /metrics)

Usage:
    from ops_health.health import (
        CheckResponse,
        Checker,
        NamedChecker,
        StatusBuilder,
        create_health_app,
    )

    class NoopChecker(Checker):
        def check(self) -> CheckResponse:
            return CheckResponse.healthy("noop is always healthy")

    status = StatusBuilder.healthchecks("example", "An example app").checker(
        NamedChecker("noop", NoopChecker())
    )

    app = create_health_app(status)
    uvicorn.run(app, host="0.0.0.0", port=3000)
"""

from ops_health.health.checks import (
    HEALTH_STATUSES,
    CheckResponse,
    Checker,
    DirectoryChecker,
    DiskSpaceChecker,
    FunctionChecker,
    Health,
    NamedChecker,
    NoopChecker,
    safe_metric_name,
)
from ops_health.health.status import (
    HealthResult,
    HealthResultEntry,
    Link,
    Owner,
    Ready,
    Status,
    StatusBuilder,
    StatusNoChecks,
    StatusWithChecks,
    record_check,
)
from ops_health.health.server import (
    create_health_app,
    create_health_router,
    run_health_server,
    serve_health,
)

__all__ = [
    # Checks
    "HEALTH_STATUSES",
    "CheckResponse",
    "Checker",
    "DirectoryChecker",
    "DiskSpaceChecker",
    "FunctionChecker",
    "Health",
    "NamedChecker",
    "NoopChecker",
    "safe_metric_name",
    # Status
    "HealthResult",
    "HealthResultEntry",
    "Link",
    "Owner",
    "Ready",
    "Status",
    "StatusBuilder",
    "StatusNoChecks",
    "StatusWithChecks",
    "record_check",
    # Server
    "create_health_app",
    "create_health_router",
    "run_health_server",
    "serve_health",
]
