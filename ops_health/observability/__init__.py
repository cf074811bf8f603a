"""Observability for the ops health subsystem.

Provides:
- Request ID context management for request tracing
- Structured logging with request ID propagation
- The Prometheus-backed metrics sink for health check results

Usage:
    from ops_health.observability import (
        configure_logging,
        get_logger,
        HealthMetrics,
    )

    configure_logging(level="INFO")
    metrics = HealthMetrics()
"""

from ops_health.observability.context import (
    set_request_id,
    get_request_id,
    clear_request_id,
    request_id_context,
)
from ops_health.observability.logging import (
    get_logger,
    configure_logging,
    add_request_id_processor,
    bind_context,
    build_processors,
    clear_context,
)
from ops_health.observability.metrics import (
    CONTENT_TYPE,
    HealthMetrics,
    MetricsSink,
    decode_metrics,
)

__all__ = [
    # Context
    "set_request_id",
    "get_request_id",
    "clear_request_id",
    "request_id_context",
    # Logging
    "get_logger",
    "configure_logging",
    "add_request_id_processor",
    "bind_context",
    "build_processors",
    "clear_context",
    # Metrics
    "CONTENT_TYPE",
    "HealthMetrics",
    "MetricsSink",
    "decode_metrics",
]
