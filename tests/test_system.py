"""Tests for GET /health."""


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "promptVersion": "v2.3",
        "credentialStore": "memory",
    }


def test_health_reports_redis_backend(client, mock_redis):
    assert client.get("/health").json()["credentialStore"] == "redis"
