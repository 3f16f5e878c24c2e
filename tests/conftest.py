"""
Shared pytest fixtures for all test modules.

Deployment-level credentials are wiped from `settings` for every test so a
developer's shell or .env never changes which key the resolver picks.
Real provider calls never happen in tests; aiohttp sessions and the genai
client are mocked.
"""

import io
import os

# Keep Redis out of the lifespan even if the shell exports Upstash credentials
os.environ.pop("UPSTASH_REDIS_HOST", None)
os.environ.pop("UPSTASH_REDIS_PASSWORD", None)

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from tests.mocks.redis_mock import MockRedis

from tampercheck.config import settings  # noqa: E402
from tampercheck.main import app  # noqa: E402

GOOGLE_KEY = "AIza" + "B" * 35
OPENAI_KEY = "sk-test-" + "a" * 24
AZURE_KEY = "0123456789abcdef0123456789abcdef"
BEDROCK_URL = "https://bedrock-proxy.example.com/invoke"


# ---------------------------------------------------------------------------
# Core infrastructure fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """No deployment defaults, google as default provider, chat route for o-series."""
    for name in (
        "google_api_key",
        "openai_api_key",
        "azure_openai_api_key",
        "bedrock_proxy_url",
        "azure_openai_endpoint",
        "azure_openai_deployment",
    ):
        monkeypatch.setattr(settings, name, None)
    monkeypatch.setattr(settings, "ai_provider", "google")
    monkeypatch.setattr(settings, "openai_reasoning_via_responses", False)
    return settings


@pytest.fixture(autouse=True)
def memory_credential_store(monkeypatch):
    """Start every test with an empty in-memory credential store and no Redis."""
    from tampercheck.integrations import redis_client as rc
    from tampercheck.services import credential_store

    monkeypatch.setattr(rc, "client", None)
    credential_store._memory.clear()
    yield credential_store._memory
    credential_store._memory.clear()


@pytest.fixture
def mock_redis(monkeypatch):
    """Replace redis_client.client with an in-memory MockRedis."""
    from tampercheck.integrations import redis_client as rc

    mock_rc = MockRedis()
    monkeypatch.setattr(rc, "client", mock_rc)
    return mock_rc


@pytest.fixture
def client():
    """
    FastAPI TestClient.

    redis_client.initialize() is patched to a no-op so it can't overwrite the
    store fixtures or attempt a real connection during lifespan startup.
    """
    with patch("tampercheck.integrations.redis_client.initialize"):
        with TestClient(app, raise_server_exceptions=False) as c:
            yield c


# ---------------------------------------------------------------------------
# Shared test-data helpers
# ---------------------------------------------------------------------------


def make_tiny_jpeg() -> bytes:
    """Create a minimal 10×10 JPEG in memory."""
    buf = io.BytesIO()
    Image.new("RGB", (10, 10), color=(128, 128, 128)).save(buf, format="JPEG")
    return buf.getvalue()


def make_tiny_png() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (6, 6), color=(240, 240, 240)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def document_image():
    from tampercheck.core.images import DocumentImage

    return DocumentImage(data=make_tiny_jpeg(), mime_type="image/jpeg", filename="id_card.jpg")


MODEL_OUTPUT = {
    "analysisLog": "Checked kerning along the name field; compared stamp lighting.",
    "overallAssessment": "SUSPICIOUS_ANOMALIES_DETECTED",
    "confidenceScore": 0.72,
    "summary": "The name field looks edited.",
    "technicalSummary": "Kerning and compression mismatch in the name field.",
    "detailedFindings": [
        {
            "finding": "Kerning differs from surrounding text",
            "location": "Name field",
            "severity": "High",
            "artifactType": "KERNING",
            "region": {"x": 0.2, "y": 0.3, "width": 0.4, "height": 0.05},
            "evidenceStrength": 0.8,
            "benignAlternatives": [],
            "crossChecks": ["Compared glyph spacing with the address line"],
            "geometricConsistency": "aligned",
            "lightingVector": None,
            "resamplingIndicators": [],
            "cloneMatches": [],
        }
    ],
    "coverageNotes": "Whole document inspected.",
    "imageQualityScore": 0.9,
    "abstainedReasons": [],
    "promptVersion": "v2.3",
}
