"""Tests for GET /api/v1/models."""

from tests.conftest import OPENAI_KEY


def test_models_catalogue(client):
    response = client.get("/api/v1/models")
    assert response.status_code == 200
    body = response.json()

    categories = {c["key"]: c for c in body["categories"]}
    assert categories["o-series"]["family"] == "reasoning"
    assert categories["o-series"]["endpoint"] == "responses"
    assert categories["o-series"]["defaultParameters"] == {
        "family": "reasoning",
        "maxOutputTokens": 4000,
        "reasoningEffort": "medium",
    }
    assert categories["gpt-4o"]["defaultParameters"]["maxTokens"] == 4000
    assert body["constraints"]["temperature"] == {"min": 0, "max": 2, "step": 0.1}


def test_provider_availability_reflects_settings(client, clean_settings):
    providers = {p["provider"]: p for p in client.get("/api/v1/models").json()["providers"]}
    assert providers["openai"]["available"] is False
    assert providers["google"]["defaultModel"] == "gemini-2.0-flash-exp"
    assert providers["bedrock-openai"]["label"] == "Bedrock Proxy URL"

    clean_settings.openai_api_key = OPENAI_KEY
    providers = {p["provider"]: p for p in client.get("/api/v1/models").json()["providers"]}
    assert providers["openai"]["available"] is True
    assert OPENAI_KEY not in str(providers)
