"""Builds Status objects from configuration.

Maps each ReadinessMode onto the matching StatusBuilder entry point and each
CheckConfig onto a built-in checker.

Usage:
    config = ConfigManager("config/ops.yaml").load_config()
    status = build_status(config)
"""

from typing import Optional

import structlog

from ops_health.health.checks import (
    Checker,
    DirectoryChecker,
    DiskSpaceChecker,
    NamedChecker,
    NoopChecker,
)
from ops_health.health.status import Status, StatusBuilder
from ops_health.models.config import CheckConfig, CheckType, OpsConfig, ReadinessMode
from ops_health.observability.metrics import HealthMetrics

logger = structlog.get_logger()


def build_checker(config: CheckConfig) -> Checker:
    """Instantiate the built-in checker described by ``config``."""
    if config.type == CheckType.DISK_SPACE:
        return DiskSpaceChecker(
            path=config.path or ".",
            min_free_gb=config.min_free_gb,
            warn_free_gb=config.warn_free_gb,
        )
    if config.type == CheckType.DIRECTORY:
        assert config.path is not None
        return DirectoryChecker(path=config.path, create=config.create)
    return NoopChecker()


def build_status(config: OpsConfig, metrics: Optional[HealthMetrics] = None) -> Status:
    """Build the Status described by ``config``.

    Args:
        config: Validated configuration
        metrics: Metrics sink to share (default: a new HealthMetrics)

    Returns:
        StatusWithChecks for readiness "healthchecks", StatusNoChecks otherwise
    """
    metrics = metrics or HealthMetrics()

    if config.readiness == ReadinessMode.HEALTHCHECKS:
        status = StatusBuilder.healthchecks(
            config.name, config.description, metrics=metrics
        )
        for check in config.checks:
            status = status.checker(NamedChecker(check.name, build_checker(check)))
    elif config.readiness == ReadinessMode.ALWAYS:
        status = StatusBuilder.always(config.name, config.description)
    elif config.readiness == ReadinessMode.NEVER:
        status = StatusBuilder.never(config.name, config.description)
    else:
        status = StatusBuilder.none(config.name, config.description)

    status = status.with_metrics(metrics)
    if config.revision:
        status = status.revision(config.revision)
    for owner in config.owners:
        status = status.owner(owner.name, owner.slack)
    for link in config.links:
        status = status.link(link.description, link.url)

    logger.debug(
        "status_built",
        name=config.name,
        readiness=config.readiness.value,
        checks=len(config.checks),
    )
    return status
