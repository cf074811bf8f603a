"""Tests for the FastAPI health endpoints."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from ops_health.health.checks import CheckResponse, FunctionChecker, NamedChecker
from ops_health.health.server import (
    REQUEST_ID_HEADER,
    create_health_app,
    create_health_router,
    render_json,
    run_health_server,
    serve_health,
)
from ops_health.health.status import Status, StatusBuilder, StatusNoChecks
from ops_health.observability.metrics import HealthMetrics
from ops_health.utils.exceptions import (
    AddressParseError,
    MetricsError,
    SerializationError,
    TransportError,
)

METRICS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


def checker(response: CheckResponse) -> FunctionChecker:
    return FunctionChecker(lambda: response)


@pytest.fixture
def degraded_status():
    """db healthy, cache degraded."""
    return (
        StatusBuilder.healthchecks("orders", "Order service")
        .checker(NamedChecker("db", checker(CheckResponse.healthy("db ok"))))
        .checker(
            NamedChecker(
                "cache", checker(CheckResponse.degraded("cache slow", "add nodes"))
            )
        )
        .revision("abc123")
        .owner("orders-team", "#orders")
        .link("runbook", "https://example.com/runbook")
    )


@pytest.fixture
def unhealthy_status():
    return StatusBuilder.healthchecks("orders", "Order service").checker(
        NamedChecker(
            "db", checker(CheckResponse.unhealthy("db down", "restart", "no orders"))
        )
    )


@pytest.fixture
def client(degraded_status):
    return TestClient(create_health_app(degraded_status))


class UnserializableStatus(StatusNoChecks):
    """Status whose metadata cannot be encoded as JSON."""

    def about(self):
        return {"name": self._name, "started": object()}


class StaticStatus(Status):
    """Minimal Status that implements only about, ready and check."""

    def about(self):
        return {"name": "static"}

    async def ready(self):
        return True

    async def check(self):
        return None


class OwnSinkStatus(StaticStatus):
    """Status that writes to a sink of its own."""

    def __init__(self):
        self._sink = HealthMetrics()

    @property
    def metrics(self):
        return self._sink


class TestHealthEndpoint:
    """Tests for /health."""

    def test_returns_aggregated_result(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        assert response.json() == {
            "name": "orders",
            "description": "Order service",
            "health": "degraded",
            "checks": [
                {
                    "name": "db",
                    "health": "healthy",
                    "output": "db ok",
                    "action": None,
                    "impact": None,
                },
                {
                    "name": "cache",
                    "health": "degraded",
                    "output": "cache slow",
                    "action": "add nodes",
                    "impact": None,
                },
            ],
        }

    def test_unhealthy_still_returns_200(self, unhealthy_status):
        client = TestClient(create_health_app(unhealthy_status))

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["health"] == "unhealthy"

    def test_empty_registry_is_unhealthy(self):
        client = TestClient(
            create_health_app(StatusBuilder.healthchecks("svc", "A service"))
        )

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["health"] == "unhealthy"
        assert response.json()["checks"] == []

    @pytest.mark.parametrize("factory", ["always", "never", "none"])
    def test_no_checks_returns_404(self, factory):
        status = getattr(StatusBuilder, factory)("svc", "A service")
        client = TestClient(create_health_app(status))

        response = client.get("/health")

        assert response.status_code == 404
        assert response.text == "No health checks"

    def test_serialization_failure_returns_500(self, client):
        with patch(
            "ops_health.health.server.render_json",
            side_effect=SerializationError("not serializable"),
        ):
            response = client.get("/health")

        assert response.status_code == 500
        assert response.text == "not serializable"


class TestReadyEndpoint:
    """Tests for /ready."""

    def test_ready_when_degraded(self, client):
        response = client.get("/ready")

        assert response.status_code == 200
        assert response.text == "ready\n"

    def test_not_ready_when_unhealthy(self, unhealthy_status):
        client = TestClient(create_health_app(unhealthy_status))

        response = client.get("/ready")

        assert response.status_code == 503
        assert response.text == "Service unavailable"

    def test_always(self):
        client = TestClient(create_health_app(StatusBuilder.always("svc", "desc")))

        response = client.get("/ready")

        assert response.status_code == 200
        assert response.text == "ready\n"

    def test_never(self):
        client = TestClient(create_health_app(StatusBuilder.never("svc", "desc")))

        response = client.get("/ready")

        assert response.status_code == 503
        assert response.text == "Service unavailable"

    def test_undefined_readiness_returns_404(self):
        client = TestClient(create_health_app(StatusBuilder.none("svc", "desc")))

        response = client.get("/ready")

        assert response.status_code == 404
        assert response.text == "not found"


class TestAboutEndpoint:
    """Tests for /about."""

    def test_returns_metadata(self, client):
        response = client.get("/about")

        assert response.status_code == 200
        assert response.json() == {
            "name": "orders",
            "description": "Order service",
            "links": [{"description": "runbook", "url": "https://example.com/runbook"}],
            "owners": [{"name": "orders-team", "slack": "#orders"}],
            "build-info": {"revision": "abc123"},
        }

    def test_serialization_failure_returns_500(self):
        client = TestClient(create_health_app(UnserializableStatus("svc", "desc")))

        response = client.get("/about")

        assert response.status_code == 500
        assert "not JSON serializable" in response.text


class TestMetricsEndpoint:
    """Tests for /metrics."""

    def test_exposes_health_gauges(self, client):
        client.get("/health")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"] == METRICS_CONTENT_TYPE
        body = response.text
        assert (
            'healthcheck_status{healthcheck_name="cache",healthcheck_result="degraded"} 1.0'
            in body
        )
        assert (
            'healthcheck_status{healthcheck_name="db",healthcheck_result="degraded"} 0.0'
            in body
        )

    def test_uses_given_metrics(self, degraded_status):
        metrics = HealthMetrics()
        metrics.set_health("external", "healthy", 1.0)
        client = TestClient(create_health_app(degraded_status, metrics=metrics))

        response = client.get("/metrics")

        assert 'healthcheck_name="external"' in response.text

    def test_given_metrics_receive_check_series(self, degraded_status):
        metrics = HealthMetrics()
        client = TestClient(create_health_app(degraded_status, metrics=metrics))

        client.get("/health")
        body = client.get("/metrics").text

        assert (
            'healthcheck_status{healthcheck_name="db",healthcheck_result="healthy"} 1.0'
            in body
        )
        assert metrics.get_health("cache", "degraded") == 1.0
        assert degraded_status.metrics.get_health("db", "healthy") is None

    def test_status_without_sink_uses_given_metrics(self):
        metrics = HealthMetrics()
        metrics.set_health("external", "healthy", 1.0)
        client = TestClient(create_health_app(StaticStatus(), metrics=metrics))

        response = client.get("/metrics")

        assert 'healthcheck_name="external"' in response.text
        assert client.get("/ready").text == "ready\n"

    def test_custom_status_with_other_sink_rejected(self):
        with pytest.raises(MetricsError, match="different metrics sink"):
            create_health_router(OwnSinkStatus(), metrics=HealthMetrics())

    def test_custom_status_own_sink_is_served(self):
        status = OwnSinkStatus()
        status.metrics.set_health("own", "degraded", 1.0)
        client = TestClient(create_health_app(status))

        assert 'healthcheck_name="own"' in client.get("/metrics").text

    def test_no_checks_status_serves_empty_metrics(self):
        client = TestClient(create_health_app(StatusBuilder.always("svc", "desc")))

        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"] == METRICS_CONTENT_TYPE

    def test_encoding_failure_returns_500(self, client):
        with patch.object(HealthMetrics, "render_bytes", return_value=b"\xff\xfe"):
            response = client.get("/metrics")

        assert response.status_code == 500
        assert "not valid UTF-8" in response.text


class TestRouting:
    """Tests for prefixes, unknown paths and request IDs."""

    def test_unknown_path_returns_not_found(self, client):
        response = client.get("/nope")

        assert response.status_code == 404
        assert response.text == "not found"

    def test_prefix(self, degraded_status):
        client = TestClient(create_health_app(degraded_status, prefix="/__"))

        assert client.get("/__/health").status_code == 200
        assert client.get("/__/ready").text == "ready\n"
        assert client.get("/__/about").json()["name"] == "orders"
        assert client.get("/__/metrics").status_code == 200
        assert client.get("/health").status_code == 404

    def test_router_mounts_into_existing_app(self, degraded_status):
        app = FastAPI()

        @app.get("/")
        async def root():
            return {"app": "orders"}

        app.include_router(create_health_router(degraded_status, prefix="/ops"))
        client = TestClient(app)

        assert client.get("/").json() == {"app": "orders"}
        assert client.get("/ops/health").json()["health"] == "degraded"

    def test_all_routes_registered(self, degraded_status):
        app = create_health_app(degraded_status)

        routes = [route.path for route in app.routes]

        for path in ("/about", "/metrics", "/ready", "/health"):
            assert path in routes

    def test_generates_request_id(self, client):
        response = client.get("/ready")

        assert response.headers[REQUEST_ID_HEADER]

    def test_echoes_request_id(self, client):
        response = client.get("/ready", headers={REQUEST_ID_HEADER: "req-42"})

        assert response.headers[REQUEST_ID_HEADER] == "req-42"

    def test_custom_title(self, degraded_status):
        app = create_health_app(degraded_status, title="Orders Ops", version="2.0.0")

        assert app.title == "Orders Ops"
        assert app.version == "2.0.0"


class TestRenderJson:
    """Tests for render_json."""

    def test_encodes_payload(self):
        assert render_json({"health": "healthy"}) == b'{"health": "healthy"}'

    def test_wraps_errors(self):
        with pytest.raises(SerializationError) as exc_info:
            render_json({"bad": object()})

        assert isinstance(exc_info.value.__cause__, TypeError)


class TestServeHealth:
    """Tests for serve_health and run_health_server."""

    @pytest.mark.asyncio
    async def test_serves_on_parsed_address(self, degraded_status):
        with patch("uvicorn.Server") as mock_server_cls:
            mock_server_cls.return_value.serve = AsyncMock()

            await serve_health(degraded_status, address="127.0.0.1:9000", prefix="/__")

        config = mock_server_cls.call_args.args[0]
        assert config.host == "127.0.0.1"
        assert config.port == 9000
        mock_server_cls.return_value.serve.assert_awaited_once()
        paths = [route.path for route in config.app.routes]
        assert "/__/health" in paths

    @pytest.mark.asyncio
    async def test_bind_failure_raises_transport_error(self, degraded_status):
        with patch("uvicorn.Server") as mock_server_cls:
            mock_server_cls.return_value.serve = AsyncMock(
                side_effect=OSError("address in use")
            )

            with pytest.raises(TransportError, match="address in use") as exc_info:
                await serve_health(degraded_status, address="127.0.0.1:9000")

        assert isinstance(exc_info.value.__cause__, OSError)

    @pytest.mark.asyncio
    async def test_bad_address_rejected_before_serving(self, degraded_status):
        with patch("uvicorn.Server") as mock_server_cls:
            with pytest.raises(AddressParseError):
                await serve_health(degraded_status, address="nowhere")

        mock_server_cls.assert_not_called()

    def test_run_health_server_blocks_on_serve(self, degraded_status):
        with patch("uvicorn.Server") as mock_server_cls:
            mock_server_cls.return_value.serve = AsyncMock()

            run_health_server(degraded_status, address="0.0.0.0:3000", log_level="warning")

        config = mock_server_cls.call_args.args[0]
        assert config.port == 3000
        assert config.log_level == "warning"
        mock_server_cls.return_value.serve.assert_awaited_once()
