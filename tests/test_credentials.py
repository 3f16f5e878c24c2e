"""Pure unit tests for tampercheck/core/credentials.py."""

import logging

import pytest

from tampercheck.core.credentials import (
    api_key_label,
    credential_format_warning,
    is_credential_available,
    mask_api_key,
    resolve_credential,
    validate_api_key,
)
from tampercheck.schemas.options import Provider
from tests.conftest import AZURE_KEY, BEDROCK_URL, GOOGLE_KEY, OPENAI_KEY


# ---------------------------------------------------------------------------
# validate_api_key
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "provider, key",
    [
        (Provider.GOOGLE, GOOGLE_KEY),
        (Provider.OPENAI, OPENAI_KEY),
        (Provider.OPENAI, "sk-proj-" + "x" * 40),
        (Provider.AZURE_OPENAI, AZURE_KEY),
        (Provider.AZURE_OPENAI, AZURE_KEY.upper()),
        (Provider.BEDROCK_OPENAI, BEDROCK_URL),
        (Provider.BEDROCK_OPENAI, "http://localhost:8080"),
    ],
)
def test_valid_formats(provider, key):
    assert validate_api_key(provider, key)


@pytest.mark.parametrize(
    "provider, key",
    [
        (Provider.GOOGLE, "AIza-too-short"),
        (Provider.GOOGLE, "XXXX" + "B" * 35),
        (Provider.OPENAI, "sk-short"),
        (Provider.OPENAI, "pk-" + "a" * 30),
        (Provider.AZURE_OPENAI, "0123456789abcdef"),
        (Provider.AZURE_OPENAI, "z" * 32),
        (Provider.BEDROCK_OPENAI, "ftp://proxy.example.com"),
        (Provider.BEDROCK_OPENAI, "not a url"),
        (Provider.OPENAI, ""),
        (Provider.OPENAI, "   "),
        (Provider.OPENAI, None),
    ],
)
def test_invalid_formats(provider, key):
    assert not validate_api_key(provider, key)


# ---------------------------------------------------------------------------
# resolve_credential
# ---------------------------------------------------------------------------


def test_valid_user_key_beats_default(clean_settings):
    clean_settings.openai_api_key = "sk-deployment-default-key"
    assert resolve_credential(Provider.OPENAI, OPENAI_KEY) == OPENAI_KEY


def test_user_key_is_trimmed():
    assert resolve_credential(Provider.OPENAI, f"  {OPENAI_KEY}\n") == OPENAI_KEY


def test_invalid_user_key_falls_back_to_default(clean_settings, caplog):
    clean_settings.google_api_key = GOOGLE_KEY
    with caplog.at_level(logging.WARNING):
        assert resolve_credential(Provider.GOOGLE, "AIza-nope") == GOOGLE_KEY
    assert "failed format check" in caplog.text
    assert "AIza-nope" not in caplog.text


def test_no_user_key_uses_default(clean_settings):
    clean_settings.bedrock_proxy_url = BEDROCK_URL
    assert resolve_credential(Provider.BEDROCK_OPENAI) == BEDROCK_URL


def test_nothing_configured_returns_none():
    assert resolve_credential(Provider.AZURE_OPENAI, None) is None
    assert resolve_credential(Provider.AZURE_OPENAI, "bad") is None


# ---------------------------------------------------------------------------
# availability / warnings / masking
# ---------------------------------------------------------------------------


def test_azure_default_needs_endpoint(clean_settings):
    clean_settings.azure_openai_api_key = AZURE_KEY
    assert not is_credential_available(Provider.AZURE_OPENAI)

    clean_settings.azure_openai_endpoint = "https://example.openai.azure.com"
    assert is_credential_available(Provider.AZURE_OPENAI)


def test_format_warning_only_for_bad_keys():
    assert credential_format_warning(Provider.OPENAI, OPENAI_KEY) is None
    assert credential_format_warning(Provider.OPENAI, None) is None

    warning = credential_format_warning(Provider.OPENAI, "oops")
    assert api_key_label(Provider.OPENAI) in warning


def test_mask_api_key():
    masked = mask_api_key(OPENAI_KEY)
    assert masked.startswith(OPENAI_KEY[:8])
    assert masked.endswith(OPENAI_KEY[-4:])
    assert OPENAI_KEY not in masked
    assert mask_api_key("short") == "•" * 8
