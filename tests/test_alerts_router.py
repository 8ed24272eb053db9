"""Tests for the alert check HTTP trigger."""

from unittest.mock import MagicMock

import pytest

pytest.importorskip("httpx")
from fastapi.testclient import TestClient

from app.dependencies import get_alert_engine, get_redis_client
from app.main import create_app
from app.routers.alerts import get_cron_secret
from app.schemas.alert import CheckResult
from app.tasks.alert_monitoring import CHECK_LOCK_NAME


@pytest.fixture()
def engine():
    engine = MagicMock()
    engine.run.return_value = CheckResult(checked=12, triggered=2)
    return engine


@pytest.fixture()
def redis_client():
    client = MagicMock()
    client.lock.return_value.acquire.return_value = True
    return client


def _client(engine, secret=None, redis_client=None):
    if redis_client is None:
        redis_client = MagicMock()
        redis_client.lock.return_value.acquire.return_value = True
    app = create_app()
    app.dependency_overrides[get_alert_engine] = lambda: engine
    app.dependency_overrides[get_redis_client] = lambda: redis_client
    app.dependency_overrides[get_cron_secret] = lambda: secret
    return TestClient(app)


def test_check_returns_counts(engine):
    response = _client(engine).post("/api/alerts/check")

    assert response.status_code == 200
    assert response.json() == {"message": "Alert check completed", "checked": 12, "triggered": 2}
    engine.run.assert_called_once()


def test_check_requires_cron_secret_when_configured(engine):
    client = _client(engine, secret="s3cret")

    assert client.post("/api/alerts/check").status_code == 401
    assert client.post("/api/alerts/check", headers={"Authorization": "Bearer wrong"}).status_code == 401
    engine.run.assert_not_called()

    response = client.post("/api/alerts/check", headers={"Authorization": "Bearer s3cret"})
    assert response.status_code == 200


def test_check_takes_run_lock(engine, redis_client):
    response = _client(engine, redis_client=redis_client).post("/api/alerts/check")

    assert response.status_code == 200
    assert redis_client.lock.call_args.args[0] == CHECK_LOCK_NAME
    redis_client.lock.return_value.release.assert_called_once()


def test_check_skips_pass_while_lock_is_held(engine, redis_client):
    redis_client.lock.return_value.acquire.return_value = False

    response = _client(engine, redis_client=redis_client).post("/api/alerts/check")

    assert response.status_code == 200
    assert response.json() == {"message": "Alert check already running", "checked": 0, "triggered": 0}
    engine.run.assert_not_called()


def test_load_failure_maps_to_500(engine):
    engine.run.side_effect = RuntimeError("database unavailable")

    response = _client(engine).post("/api/alerts/check")

    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to check alerts"}


def test_health():
    response = TestClient(create_app()).get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
