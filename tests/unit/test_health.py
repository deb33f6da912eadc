"""
Tests for health check endpoints.
"""

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from showfinder.main import app

client = TestClient(app)

HEALTHY_POOL = {
    "healthy": True,
    "service": "database_pool",
    "connection_time_ms": 1.2,
    "pool_stats": {"pool_size": 3, "pool_available": 3, "pool_utilization_percent": 0, "requests_waiting": 0},
}


def test_healthz_endpoint():
    """Test the basic health check endpoint."""
    response = client.get("/healthz")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "showfinder"


def test_readyz_endpoint_all_services_healthy():
    """Test readiness endpoint when all services are healthy."""
    with (
        patch("showfinder.routes.health.fast_redis.ping", AsyncMock(return_value=True)),
        patch("showfinder.routes.health.fast_redis.queue_length", AsyncMock(return_value=4)),
        patch("showfinder.routes.health.db_health_check", AsyncMock(return_value=HEALTHY_POOL)),
    ):
        response = client.get("/readyz")

    assert response.status_code == 200
    data = response.json()
    assert data["overall_ok"] is True
    assert data["checks"]["redis"]["ok"] is True
    assert data["checks"]["redis"]["notification_backlog"] == 4
    assert data["checks"]["database"]["ok"] is True
    assert data["checks"]["database"]["pool_stats"]["pool_size"] == 3


def test_readyz_endpoint_redis_unhealthy():
    """Test readiness endpoint when Redis is down."""
    with (
        patch("showfinder.routes.health.fast_redis.ping", AsyncMock(return_value=False)),
        patch("showfinder.routes.health.fast_redis.queue_length", AsyncMock(return_value=None)),
        patch("showfinder.routes.health.db_health_check", AsyncMock(return_value=HEALTHY_POOL)),
    ):
        response = client.get("/readyz")

    # Should still return 200, but overall_ok should be False
    assert response.status_code == 200
    data = response.json()
    assert data["overall_ok"] is False
    assert data["checks"]["redis"]["ok"] is False


def test_readyz_endpoint_database_unhealthy():
    """Test readiness endpoint when the pool is not initialized."""
    with (
        patch("showfinder.routes.health.fast_redis.ping", AsyncMock(return_value=True)),
        patch("showfinder.routes.health.fast_redis.queue_length", AsyncMock(return_value=0)),
        patch(
            "showfinder.routes.health.db_health_check",
            AsyncMock(return_value={"healthy": False, "error": "Pool not initialized"}),
        ),
    ):
        response = client.get("/readyz")

    data = response.json()
    assert data["overall_ok"] is False
    assert data["checks"]["database"]["ok"] is False
    assert data["checks"]["database"]["error"] == "Pool not initialized"


def test_readyz_includes_latency_metrics():
    """Test that readiness checks include latency metrics."""
    with (
        patch("showfinder.routes.health.fast_redis.ping", AsyncMock(return_value=True)),
        patch("showfinder.routes.health.fast_redis.queue_length", AsyncMock(return_value=0)),
        patch("showfinder.routes.health.db_health_check", AsyncMock(return_value=HEALTHY_POOL)),
    ):
        response = client.get("/readyz")

    checks = response.json()["checks"]
    assert isinstance(checks["redis"]["latency_ms"], (int, float))
    assert isinstance(checks["database"]["latency_ms"], (int, float))
