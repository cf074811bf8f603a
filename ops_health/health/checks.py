"""Health vocabulary and the checker abstraction.

Provides:
- Health: ordered status values (healthy < degraded < unhealthy)
- CheckResponse: outcome of a single checker invocation
- Checker: interface implemented by every probe
- NamedChecker: a checker bound to a metric-safe name
- Built-in checkers for disk space and writable directories

Usage:
    class DatabaseChecker(Checker):
        def check(self) -> CheckResponse:
            if db.ping():
                return CheckResponse.healthy("database reachable")
            return CheckResponse.unhealthy(
                "database unreachable",
                action="check the database host",
                impact="requests that read data will fail",
            )

    named = NamedChecker("primary db", DatabaseChecker())
    named.name  # "primary_db"
"""

import re
import shutil
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

import structlog

logger = structlog.get_logger()

_UNSAFE_METRIC_CHARS = re.compile(r"[^A-Za-z0-9_:]")


class Health(str, Enum):
    """Health status values, ordered by severity."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"

    @property
    def rank(self) -> int:
        """Severity rank, 0 for healthy."""
        return _HEALTH_RANK[self]

    # str already defines the rich comparisons lexically, so all four
    # must be overridden for max() and sorted() to follow severity.
    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Health):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Health):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Health):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Health):
            return NotImplemented
        return self.rank >= other.rank

    def __str__(self) -> str:
        return self.value

    @classmethod
    def worst(cls, statuses: Iterable["Health"]) -> "Health":
        """Aggregate statuses (worst wins).

        An empty input is treated as unhealthy: asking for checks when none
        are configured is itself a misconfiguration.
        """
        return max(statuses, default=cls.UNHEALTHY)


_HEALTH_RANK = {
    Health.HEALTHY: 0,
    Health.DEGRADED: 1,
    Health.UNHEALTHY: 2,
}

# Every health value, in severity order
HEALTH_STATUSES = (Health.HEALTHY, Health.DEGRADED, Health.UNHEALTHY)


@dataclass(frozen=True)
class CheckResponse:
    """Result of a single checker invocation.

    Non-healthy responses should say what to do (action) and, when unhealthy,
    what breaks if nothing is done (impact). The factory methods encode that
    convention.
    """

    health: Health
    output: str
    action: Optional[str] = None
    impact: Optional[str] = None

    @classmethod
    def healthy(cls, output: str) -> "CheckResponse":
        """Create healthy response."""
        return cls(health=Health.HEALTHY, output=output)

    @classmethod
    def degraded(cls, output: str, action: str) -> "CheckResponse":
        """Create degraded response."""
        return cls(health=Health.DEGRADED, output=output, action=action)

    @classmethod
    def unhealthy(cls, output: str, action: str, impact: str) -> "CheckResponse":
        """Create unhealthy response."""
        return cls(
            health=Health.UNHEALTHY,
            output=output,
            action=action,
            impact=impact,
        )


class Checker(ABC):
    """Something that can be periodically checked.

    check() is called from worker threads, possibly by several aggregation
    cycles at once, so implementations must be thread safe. There is no
    timeout around the call: a checker that never returns stalls every
    /health and /ready request.
    """

    @abstractmethod
    def check(self) -> CheckResponse:
        """Run the check and return its response."""


class FunctionChecker(Checker):
    """Adapts a zero-argument callable into a Checker."""

    def __init__(self, func: Callable[[], CheckResponse]):
        self._func = func

    def check(self) -> CheckResponse:
        return self._func()

    def __repr__(self) -> str:
        return f"FunctionChecker({getattr(self._func, '__name__', self._func)!r})"


class NoopChecker(Checker):
    """Always healthy."""

    def check(self) -> CheckResponse:
        return CheckResponse.healthy("noop is always healthy")


class DiskSpaceChecker(Checker):
    """Checks free disk space on the volume holding ``path``.

    Below ``min_free_gb`` the volume is unhealthy, below ``warn_free_gb`` it
    is degraded.
    """

    def __init__(
        self,
        path: Union[str, Path] = ".",
        min_free_gb: float = 1.0,
        warn_free_gb: float = 5.0,
    ):
        if warn_free_gb < min_free_gb:
            raise ValueError("warn_free_gb must be >= min_free_gb")
        self.path = Path(path)
        self.min_free_gb = min_free_gb
        self.warn_free_gb = warn_free_gb

    def check(self) -> CheckResponse:
        try:
            _, _, free = shutil.disk_usage(self.path)
        except OSError as e:
            logger.error("disk_space_check_failed", path=str(self.path), error=str(e))
            return CheckResponse.unhealthy(
                f"Disk check failed for {self.path}: {e}",
                action=f"Verify that {self.path} exists and is mounted",
                impact="Free disk space is unknown",
            )

        free_gb = free / (1024**3)

        if free_gb < self.min_free_gb:
            return CheckResponse.unhealthy(
                f"Disk space critical: {free_gb:.1f}GB free",
                action=f"Free space on the volume holding {self.path}",
                impact="Writes to disk will start failing",
            )
        if free_gb < self.warn_free_gb:
            return CheckResponse.degraded(
                f"Disk space low: {free_gb:.1f}GB free",
                action=f"Free space on the volume holding {self.path}",
            )
        return CheckResponse.healthy(f"Disk space OK: {free_gb:.1f}GB free")


class DirectoryChecker(Checker):
    """Checks that a directory exists and is writable."""

    def __init__(self, path: Union[str, Path], create: bool = True):
        self.path = Path(path)
        self.create = create

    def check(self) -> CheckResponse:
        try:
            if not self.path.exists():
                if not self.create:
                    return CheckResponse.unhealthy(
                        f"Directory {self.path} does not exist",
                        action=f"Create {self.path}",
                        impact="Files cannot be written",
                    )
                self.path.mkdir(parents=True, exist_ok=True)

            # Unique probe name so concurrent cycles don't race on one file
            probe = self.path / f".health_check_{uuid.uuid4().hex}"
            probe.write_text("health_check")
            probe.unlink()
        except OSError as e:
            return CheckResponse.unhealthy(
                f"Directory {self.path} not writable: {e}",
                action=f"Fix permissions on {self.path}",
                impact="Files cannot be written",
            )

        return CheckResponse.healthy(f"Directory {self.path} writable")


def safe_metric_name(name: str) -> str:
    """Replace every character outside [A-Za-z0-9_:] with an underscore."""
    return _UNSAFE_METRIC_CHARS.sub("_", name)


class NamedChecker:
    """Associates a metric-safe name with a Checker.

    Names are not required to be unique. Two checkers sharing a name also
    share the same metric series.
    """

    __slots__ = ("_name", "_checker")

    def __init__(self, name: str, checker: Checker):
        self._name = safe_metric_name(name)
        self._checker = checker

    @property
    def name(self) -> str:
        """The sanitized checker name."""
        return self._name

    @property
    def checker(self) -> Checker:
        """The wrapped checker."""
        return self._checker

    def __repr__(self) -> str:
        return f"NamedChecker(name={self._name!r})"
