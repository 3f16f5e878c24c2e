"""
Credential resolution and format checks.

A user-supplied key wins when it is non-empty and passes the provider's
format check; otherwise the deployment default from settings is used.
A failing format check never raises: the resolver falls back and the caller
surfaces `credential_format_warning()` to the user.

Settings are read at call time so tests and runtime overrides are honoured.
Key values are never logged.
"""

import logging
import re
from typing import Optional
from urllib.parse import urlparse

from tampercheck.config import settings
from tampercheck.schemas.options import Provider

logger = logging.getLogger(__name__)

_AZURE_KEY_RE = re.compile(r"^[a-f0-9]{32}$", re.IGNORECASE)

_LABELS = {
    Provider.GOOGLE: "Google API Key",
    Provider.OPENAI: "OpenAI API Key",
    Provider.AZURE_OPENAI: "Azure OpenAI API Key",
    Provider.BEDROCK_OPENAI: "Bedrock Proxy URL",
}

_PLACEHOLDERS = {
    Provider.GOOGLE: "AIzaSy...",
    Provider.OPENAI: "sk-proj-... or sk-...",
    Provider.AZURE_OPENAI: "abc123def456...",
    Provider.BEDROCK_OPENAI: "https://your-proxy.example.com/bedrock",
}

_DESCRIPTIONS = {
    Provider.GOOGLE: "Get your API key from the Google AI Studio (https://aistudio.google.com/app/apikey)",
    Provider.OPENAI: "Get your API key from the OpenAI Platform (https://platform.openai.com/api-keys)",
    Provider.AZURE_OPENAI: "Get your API key from the Azure OpenAI Service in the Azure portal",
    Provider.BEDROCK_OPENAI: "Provide the URL to your AWS Bedrock OpenAI-compatible proxy service",
}


def validate_api_key(provider: Provider, api_key: Optional[str]) -> bool:
    """Shape check only; says nothing about whether the provider accepts the key."""
    if not api_key or not isinstance(api_key, str) or not api_key.strip():
        return False

    key = api_key.strip()

    if provider == Provider.GOOGLE:
        return key.startswith("AIza") and len(key) == 39
    if provider == Provider.OPENAI:
        # 'sk-proj-' keys also start with 'sk-'
        return key.startswith("sk-") and len(key) >= 20
    if provider == Provider.AZURE_OPENAI:
        return bool(_AZURE_KEY_RE.match(key))
    if provider == Provider.BEDROCK_OPENAI:
        parsed = urlparse(key)
        return parsed.scheme in ("http", "https") and bool(parsed.netloc)
    return False


def deployment_default(provider: Provider) -> Optional[str]:
    value = {
        Provider.GOOGLE: settings.google_api_key,
        Provider.OPENAI: settings.openai_api_key,
        Provider.AZURE_OPENAI: settings.azure_openai_api_key,
        Provider.BEDROCK_OPENAI: settings.bedrock_proxy_url,
    }[provider]
    return value or None


def resolve_credential(provider: Provider, user_supplied: Optional[str] = None) -> Optional[str]:
    """Return the effective credential for `provider`, or None when it is unusable."""
    if user_supplied and user_supplied.strip():
        if validate_api_key(provider, user_supplied):
            return user_supplied.strip()
        logger.warning(
            f"[CREDENTIALS] Supplied {provider.value} credential failed format check; "
            "falling back to deployment default"
        )

    return deployment_default(provider)


def credential_format_warning(provider: Provider, user_supplied: Optional[str]) -> Optional[str]:
    """Message to show when a supplied credential will be ignored, else None."""
    if not user_supplied or not user_supplied.strip():
        return None
    if validate_api_key(provider, user_supplied):
        return None
    return (
        f"The {api_key_label(provider)} does not look valid "
        f"(expected something like '{api_key_placeholder(provider)}'). "
        "The deployment default will be used instead, if one is configured."
    )


def is_credential_available(provider: Provider, user_supplied: Optional[str] = None) -> bool:
    if user_supplied and user_supplied.strip():
        return validate_api_key(provider, user_supplied)

    if provider == Provider.AZURE_OPENAI:
        return bool(settings.azure_openai_api_key and settings.azure_openai_endpoint)
    return deployment_default(provider) is not None


def mask_api_key(api_key: Optional[str]) -> str:
    """Show the first 8 and last 4 characters, at most 16 bullets in between."""
    if not api_key or len(api_key) < 12:
        return "•" * 8

    middle = min(16, max(4, len(api_key) - 12))
    return f"{api_key[:8]}{'•' * middle}{api_key[-4:]}"


def api_key_label(provider: Provider) -> str:
    return _LABELS.get(provider, "API Key")


def api_key_placeholder(provider: Provider) -> str:
    return _PLACEHOLDERS.get(provider, "Enter your API key...")


def api_key_description(provider: Provider) -> str:
    return _DESCRIPTIONS.get(provider, "Obtain your API key from the respective provider")
