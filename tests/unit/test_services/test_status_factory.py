"""Tests for building Status objects from configuration."""

import pytest

from ops_health.health.checks import (
    DirectoryChecker,
    DiskSpaceChecker,
    Health,
    NoopChecker,
)
from ops_health.health.status import StatusNoChecks, StatusWithChecks
from ops_health.models.config import CheckConfig, OpsConfig
from ops_health.observability.metrics import HealthMetrics
from ops_health.services.status_factory import build_checker, build_status


class TestBuildChecker:
    def test_noop(self):
        assert isinstance(build_checker(CheckConfig(type="noop", name="n")), NoopChecker)

    def test_disk_space(self):
        checker = build_checker(
            CheckConfig(
                type="disk_space",
                name="disk",
                path="/var",
                min_free_gb=2.0,
                warn_free_gb=8.0,
            )
        )

        assert isinstance(checker, DiskSpaceChecker)
        assert str(checker.path) == "/var"
        assert checker.min_free_gb == 2.0
        assert checker.warn_free_gb == 8.0

    def test_disk_space_defaults_to_cwd(self):
        checker = build_checker(CheckConfig(type="disk_space", name="disk"))

        assert str(checker.path) == "."

    def test_directory(self, tmp_path):
        checker = build_checker(
            CheckConfig(type="directory", name="d", path=str(tmp_path), create=False)
        )

        assert isinstance(checker, DirectoryChecker)
        assert checker.path == tmp_path
        assert checker.create is False


class TestBuildStatus:
    def test_healthchecks(self, tmp_path):
        config = OpsConfig(
            name="orders",
            description="Order service",
            checks=[
                {"type": "noop", "name": "noop"},
                {"type": "directory", "name": "data dir", "path": str(tmp_path)},
            ],
        )

        status = build_status(config)

        assert isinstance(status, StatusWithChecks)
        assert [c.name for c in status.checkers] == ["noop", "data_dir"]

    @pytest.mark.parametrize("mode", ["always", "never", "none"])
    def test_fixed_readiness(self, mode):
        status = build_status(OpsConfig(name="svc", readiness=mode))

        assert isinstance(status, StatusNoChecks)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "mode, expected", [("always", True), ("never", False), ("none", None)]
    )
    async def test_fixed_readiness_answers(self, mode, expected):
        status = build_status(OpsConfig(name="svc", readiness=mode))

        assert await status.ready() is expected
        assert await status.check() is None

    def test_metadata(self):
        config = OpsConfig(
            name="orders",
            description="Order service",
            revision="abc123",
            owners=[{"name": "orders-team", "slack": "#orders"}],
            links=[{"description": "runbook", "url": "https://example.com/rb"}],
        )

        about = build_status(config).about()

        assert about == {
            "name": "orders",
            "description": "Order service",
            "links": [{"description": "runbook", "url": "https://example.com/rb"}],
            "owners": [{"name": "orders-team", "slack": "#orders"}],
            "build-info": {"revision": "abc123"},
        }

    def test_no_revision(self):
        about = build_status(OpsConfig(name="svc")).about()

        assert about["build-info"] == {"revision": None}

    @pytest.mark.parametrize("mode", ["always", "healthchecks"])
    def test_uses_given_metrics(self, mode):
        metrics = HealthMetrics()

        status = build_status(OpsConfig(name="svc", readiness=mode), metrics=metrics)

        assert status.metrics is metrics

    @pytest.mark.asyncio
    async def test_check_cycle_writes_given_metrics(self):
        metrics = HealthMetrics()
        config = OpsConfig(name="svc", checks=[{"type": "noop", "name": "noop"}])

        result = await build_status(config, metrics=metrics).check()

        assert result.health is Health.HEALTHY
        assert metrics.get_health("noop", "healthy") == 1.0
        assert metrics.get_health("noop", "unhealthy") == 0.0
