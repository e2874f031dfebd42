from fastapi.testclient import TestClient

from marketing_site.main import app

client = TestClient(app)


def test_health_reports_unconfigured_email():
    response = client.get("/api/health")
    assert response.status_code == 200

    body = response.json()
    assert body["service"] == "marketing_site"
    assert body["environment"] == "testing"
    assert body["checks"]["email"]["status"] == "unhealthy"
    assert body["checks"]["rate_limiter"]["status"] == "healthy"
    assert body["checks"]["rate_limiter"]["limit"] == "5"
    assert body["status"] == "degraded"


def test_liveness_probe():
    response = client.get("/api/health/live")
    assert response.status_code == 200
    assert response.json()["status"] == "alive"


def test_root():
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["contact"] == "/api/contact"


def test_health_check_sweeps_idle_clients(monkeypatch, pipeline, rate_limiter, clock):
    monkeypatch.setattr(app.state, "contact_pipeline", pipeline)
    rate_limiter.admit("198.51.100.1")
    clock.advance(301)
    rate_limiter.admit("198.51.100.2")

    checks = client.get("/api/health").json()["checks"]["rate_limiter"]

    assert checks["swept_clients"] == "1"
    assert checks["tracked_clients"] == "1"
    assert len(rate_limiter) == 1
