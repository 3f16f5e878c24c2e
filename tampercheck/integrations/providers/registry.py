"""Provider dispatch table."""

import logging
from typing import Dict, Optional

from tampercheck.config import settings
from tampercheck.core.errors import UnsupportedProvider
from tampercheck.integrations.providers.azure import AzureOpenAIProvider
from tampercheck.integrations.providers.base import BaseProvider
from tampercheck.integrations.providers.bedrock import BedrockOpenAIProvider
from tampercheck.integrations.providers.google import GoogleProvider
from tampercheck.integrations.providers.openai import OpenAIProvider
from tampercheck.schemas.options import Provider

logger = logging.getLogger(__name__)

PROVIDERS: Dict[Provider, BaseProvider] = {
    Provider.GOOGLE: GoogleProvider(),
    Provider.OPENAI: OpenAIProvider(),
    Provider.AZURE_OPENAI: AzureOpenAIProvider(),
    Provider.BEDROCK_OPENAI: BedrockOpenAIProvider(),
}


def resolve_provider(name: Optional[str] = None) -> Provider:
    """Map a provider name (or the configured default) onto the enumeration."""
    requested = name or settings.ai_provider
    try:
        return Provider(requested.strip().lower())
    except (ValueError, AttributeError):
        logger.warning(f"[DISPATCH] Unsupported provider requested: {requested!r}")
        raise UnsupportedProvider(requested)


def get_provider(name: Optional[str] = None) -> BaseProvider:
    return PROVIDERS[resolve_provider(name)]
