"""Prometheus metrics for health check results.

Each check cycle mirrors every checker's result into the
``healthcheck_status`` gauge as a one-hot encoding:

    healthcheck_status{healthcheck_name="db",healthcheck_result="healthy"} 1.0
    healthcheck_status{healthcheck_name="db",healthcheck_result="degraded"} 0.0
    healthcheck_status{healthcheck_name="db",healthcheck_result="unhealthy"} 0.0

so alerting rules can key on any (checker, result) pair.

Usage:
    from ops_health.observability.metrics import HealthMetrics

    metrics = HealthMetrics()
    metrics.set_health("db", "healthy", 1.0)

    # Exposition text for the /metrics endpoint
    body = metrics.render()

The sink is created explicitly and handed to whatever needs it. There is no
module-level registry, so tests and multiple status objects stay isolated.
"""

from typing import Optional, Protocol

from prometheus_client import (
    CollectorRegistry,
    Gauge,
    generate_latest,
)

from ops_health.utils.exceptions import EncodingError, MetricsError

HEALTHCHECK_NAME = "healthcheck_name"
HEALTHCHECK_RESULT = "healthcheck_result"
HEALTHCHECK_STATUS = "healthcheck_status"

# Text exposition format 0.0.4
CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


class MetricsSink(Protocol):
    """Anything that accepts labeled health gauge updates.

    Implementations are shared by concurrent check cycles and must make each
    per-series write atomic.
    """

    def set_health(self, checker_name: str, health_value: str, value: float) -> None:
        ...


class HealthMetrics:
    """Prometheus-backed metrics sink.

    Registers the ``healthcheck_status`` gauge on its registry. A fresh
    registry is created when none is given.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """Initialize metrics sink.

        Args:
            registry: Registry to register the gauge on (default: new registry)

        Raises:
            MetricsError: If the gauge is already registered on ``registry``
        """
        self.registry = registry or CollectorRegistry(auto_describe=True)
        try:
            self.status_gauge = Gauge(
                name=HEALTHCHECK_STATUS,
                documentation=(
                    "Meters the healthcheck status based for each check "
                    "and for each result"
                ),
                labelnames=[HEALTHCHECK_NAME, HEALTHCHECK_RESULT],
                registry=self.registry,
            )
        except ValueError as e:
            raise MetricsError(f"failed to register {HEALTHCHECK_STATUS}: {e}") from e

    def set_health(self, checker_name: str, health_value: str, value: float) -> None:
        """Set one (checker, result) series."""
        self.status_gauge.labels(
            **{HEALTHCHECK_NAME: checker_name, HEALTHCHECK_RESULT: health_value}
        ).set(value)

    def get_health(self, checker_name: str, health_value: str) -> Optional[float]:
        """Read back one series, or None if it was never written."""
        return self.registry.get_sample_value(
            HEALTHCHECK_STATUS,
            {HEALTHCHECK_NAME: checker_name, HEALTHCHECK_RESULT: health_value},
        )

    def render_bytes(self) -> bytes:
        """Generate the exposition format body.

        Raises:
            MetricsError: If a collector fails during collection
        """
        try:
            return generate_latest(self.registry)
        except Exception as e:
            raise MetricsError.wrap(e) from e

    def render(self) -> str:
        """Generate the exposition format body as text.

        Raises:
            MetricsError: If rendering fails
            EncodingError: If the rendered bytes are not valid UTF-8
        """
        return decode_metrics(self.render_bytes())


def decode_metrics(payload: bytes) -> str:
    """Decode rendered metrics, raising EncodingError on invalid UTF-8."""
    try:
        return payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise EncodingError(f"metrics output is not valid UTF-8: {e}") from e
