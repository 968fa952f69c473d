from datetime import datetime


def test_health(client):
    r = client.get("/api/v1/health")
    assert r.status_code == 200 and r.mimetype == "application/json"
    assert r.json["status"] == "OK"
    assert r.json["message"] == "Server is running normally"
    assert r.json["https"] is False
    assert datetime.fromisoformat(r.json["timestamp"]).tzinfo is not None


def test_health_over_https(client):
    r = client.get("/api/v1/health", base_url="https://localhost")
    assert r.json["https"] is True


def test_status(client):
    r = client.get("/api/v1/status")
    assert r.status_code == 200
    assert list(r.json) == ["version", "status", "timestamp", "https", "services"]
    assert r.json["version"] == "1.0.0" and r.json["status"] == "running"
    assert r.json["services"] == {"database": "connected", "cache": "connected", "queue": "connected"}


def test_ping(client):
    r = client.get("/api/v1/ping")
    assert r.status_code == 200 and r.mimetype == "application/json"
    assert list(r.json) == ["message", "timestamp", "https"]
    assert r.json["message"] == "pong" and r.json["https"] is False
    datetime.fromisoformat(r.json["timestamp"])

    r = client.get("/api/v1/ping", base_url="https://localhost")
    assert r.json["https"] is True


def test_api_is_get_only(client):
    r = client.post("/api/v1/ping")
    assert r.status_code == 405
