"""Status objects served by the health endpoints.

Two variants implement the Status interface:
- StatusNoChecks: fixed readiness (always, never or undefined), no checks
- StatusWithChecks: readiness and health derived from registered checkers

Both are created through StatusBuilder and configured fluently. Every
configuration call returns a new object, so a partially built status can be
reused as a template without leaking changes.

Usage:
    status = (
        StatusBuilder.healthchecks("orders", "Order service")
        .checker(NamedChecker("db", DatabaseChecker()))
        .checker(NamedChecker("cache", CacheChecker()))
        .revision("12561012a04f945852cf0171da516a9ffc709e76")
        .owner("orders-team", "#orders")
        .link("runbook", "https://wiki.example.com/orders")
    )

    result = await status.check()
    result.health  # worst of all checker results
"""

import asyncio
import copy
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import structlog

from ops_health.health.checks import (
    HEALTH_STATUSES,
    CheckResponse,
    Health,
    NamedChecker,
)
from ops_health.observability.metrics import HealthMetrics, MetricsSink

logger = structlog.get_logger()


class Ready(Enum):
    """Fixed readiness modes for StatusNoChecks."""

    ALWAYS = "always"
    NEVER = "never"


@dataclass(frozen=True)
class Owner:
    """A team or person responsible for the service."""

    name: str
    slack: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "slack": self.slack}


@dataclass(frozen=True)
class Link:
    """A documentation or dashboard link for the service."""

    description: str
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return {"description": self.description, "url": self.url}


@dataclass(frozen=True)
class HealthResultEntry:
    """One checker's response inside a HealthResult."""

    name: str
    health: Health
    output: str
    action: Optional[str] = None
    impact: Optional[str] = None

    @classmethod
    def from_response(cls, name: str, response: CheckResponse) -> "HealthResultEntry":
        return cls(
            name=name,
            health=response.health,
            output=response.output,
            action=response.action,
            impact=response.impact,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "health": self.health.value,
            "output": self.output,
            "action": self.action,
            "impact": self.impact,
        }


@dataclass(frozen=True)
class HealthResult:
    """Aggregated result of one check cycle."""

    name: str
    description: str
    health: Health
    checks: Tuple[HealthResultEntry, ...]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "description": self.description,
            "health": self.health.value,
            "checks": [c.to_dict() for c in self.checks],
        }


def record_check(sink: MetricsSink, checker_name: str, health: Health) -> None:
    """Write the one-hot encoding of ``health`` for one checker.

    Exactly one write per health value: the series matching ``health`` is set
    to 1.0, the other two to 0.0.
    """
    for status in HEALTH_STATUSES:
        sink.set_health(checker_name, status.value, 1.0 if status is health else 0.0)


class Status(ABC):
    """Interface consumed by the health endpoints."""

    @abstractmethod
    def about(self) -> Dict[str, Any]:
        """Details of the application, as a JSON-ready dict."""

    @abstractmethod
    async def ready(self) -> Optional[bool]:
        """Readiness of the application, None if readiness is undefined."""

    @abstractmethod
    async def check(self) -> Optional[HealthResult]:
        """Health of the application, None if there are no checks."""

    @property
    def metrics(self) -> Optional[HealthMetrics]:
        """Metrics sink backing /metrics, if any."""
        return None


class _StatusBase(Status):
    """Metadata and fluent configuration shared by both variants."""

    def __init__(
        self,
        name: str,
        description: str,
        metrics: Optional[HealthMetrics] = None,
    ):
        self._name = name
        self._description = description
        self._revision: Optional[str] = None
        self._owners: Tuple[Owner, ...] = ()
        self._links: Tuple[Link, ...] = ()
        self._metrics = metrics

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def metrics(self) -> Optional[HealthMetrics]:
        return self._metrics

    def _replace(self, **changes: Any):
        clone = copy.copy(self)
        for attr, value in changes.items():
            setattr(clone, f"_{attr}", value)
        return clone

    def revision(self, revision: str):
        """Set the revision, this should be a version control ref."""
        return self._replace(revision=revision)

    def owner(self, name: str, slack: str):
        """Add an owner."""
        return self._replace(owners=self._owners + (Owner(name, slack),))

    def link(self, description: str, url: str):
        """Add a link."""
        return self._replace(links=self._links + (Link(description, url),))

    def with_metrics(self, metrics: HealthMetrics):
        """Use ``metrics`` as the metrics sink."""
        return self._replace(metrics=metrics)

    def about(self) -> Dict[str, Any]:
        return {
            "name": self._name,
            "description": self._description,
            "links": [link.to_dict() for link in self._links],
            "owners": [owner.to_dict() for owner in self._owners],
            "build-info": {
                "revision": self._revision,
            },
        }

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self._name!r}, "
            f"description={self._description!r})"
        )


class StatusNoChecks(_StatusBase):
    """A status without health checks.

    ready() answers from the fixed mode chosen at construction and check()
    always returns None.
    """

    def __init__(
        self,
        name: str,
        description: str,
        ready: Optional[Ready] = None,
        metrics: Optional[HealthMetrics] = None,
    ):
        super().__init__(name, description, metrics=metrics)
        self._ready = ready

    async def ready(self) -> Optional[bool]:
        if self._ready is None:
            return None
        return self._ready is Ready.ALWAYS

    async def check(self) -> Optional[HealthResult]:
        return None


class StatusWithChecks(_StatusBase):
    """A status backed by a list of NamedCheckers.

    Each check() call runs every checker concurrently on worker threads and
    waits for all of them. There is no timeout: a checker that hangs stalls
    the whole cycle, so callers that need a bound should wrap the request
    in their own timeout.
    """

    def __init__(
        self,
        name: str,
        description: str,
        metrics: Optional[HealthMetrics] = None,
    ):
        super().__init__(name, description, metrics=metrics or HealthMetrics())
        self._checkers: Tuple[NamedChecker, ...] = ()

    @property
    def metrics(self) -> HealthMetrics:
        return self._metrics

    @property
    def checkers(self) -> List[NamedChecker]:
        """Registered checkers, in registration order."""
        return list(self._checkers)

    def checker(self, checker: NamedChecker) -> "StatusWithChecks":
        """Add a NamedChecker."""
        return self._replace(checkers=self._checkers + (checker,))

    async def ready(self) -> Optional[bool]:
        result = await self.check()
        # Degraded still serves traffic
        return result.health is not Health.UNHEALTHY

    async def check(self) -> Optional[HealthResult]:
        start = time.monotonic()
        checkers = self._checkers

        responses = await asyncio.gather(*(self._run(c) for c in checkers))

        entries = []
        for named, response in zip(checkers, responses):
            record_check(self._metrics, named.name, response.health)
            entries.append(HealthResultEntry.from_response(named.name, response))

        health = Health.worst(entry.health for entry in entries)

        logger.debug(
            "health_check_completed",
            status=self._name,
            health=health.value,
            checks=len(entries),
            duration_ms=round((time.monotonic() - start) * 1000, 2),
        )

        return HealthResult(
            name=self._name,
            description=self._description,
            health=health,
            checks=tuple(entries),
        )

    async def _run(self, named: NamedChecker) -> CheckResponse:
        """Run one checker on a worker thread."""
        try:
            return await asyncio.to_thread(named.checker.check)
        except Exception as e:
            logger.exception("checker_failed", checker=named.name, error=str(e))
            return CheckResponse.unhealthy(
                f"Check failed: {type(e).__name__}: {e}",
                action=f"Inspect the logs of the {named.name} checker",
                impact=f"Health of {named.name} is unknown",
            )


class StatusBuilder:
    """Builds status objects."""

    @staticmethod
    def always(name: str, description: str) -> StatusNoChecks:
        """A status that is always ready."""
        return StatusNoChecks(name, description, ready=Ready.ALWAYS)

    @staticmethod
    def never(name: str, description: str) -> StatusNoChecks:
        """A status that is never ready."""
        return StatusNoChecks(name, description, ready=Ready.NEVER)

    @staticmethod
    def none(name: str, description: str) -> StatusNoChecks:
        """A status with no concept of readiness."""
        return StatusNoChecks(name, description, ready=None)

    @staticmethod
    def healthchecks(
        name: str,
        description: str,
        metrics: Optional[HealthMetrics] = None,
    ) -> StatusWithChecks:
        """A status that expects one or more NamedCheckers.

        Args:
            name: Service name
            description: Service description
            metrics: Shared metrics sink (default: a private HealthMetrics)
        """
        return StatusWithChecks(name, description, metrics=metrics)
