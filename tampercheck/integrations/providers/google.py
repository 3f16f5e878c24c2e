"""
Gemini via the google-genai SDK.

The SDK owns the HTTP call, so `send` is overridden; its errors are mapped
onto the same ProviderError / NetworkError kinds the HTTP providers raise.
"""

import logging
from typing import Any, Dict

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from tampercheck.config import settings
from tampercheck.core.errors import NetworkError, ProviderError
from tampercheck.core.images import DocumentImage
from tampercheck.integrations.prompts import RESPONSE_SCHEMA
from tampercheck.integrations.providers.base import BaseProvider, ModelTarget, ProviderRequest
from tampercheck.schemas.options import Provider
from tampercheck.schemas.parameters import (
    ExtendedContextParameters,
    GenerationParameters,
    ReasoningParameters,
)

logger = logging.getLogger(__name__)


def _generation_config(parameters: GenerationParameters) -> Dict[str, Any]:
    if isinstance(parameters, ReasoningParameters):
        return {"max_output_tokens": parameters.max_output_tokens}

    token_limit = (
        parameters.max_completion_tokens
        if isinstance(parameters, ExtendedContextParameters)
        else parameters.max_tokens
    )
    return {
        "temperature": parameters.temperature,
        "top_p": parameters.top_p,
        "max_output_tokens": token_limit,
    }


class GoogleProvider(BaseProvider):
    name = Provider.GOOGLE

    def default_model(self) -> str:
        return settings.google_model

    def build_request(
        self,
        prompt: str,
        image: DocumentImage,
        target: ModelTarget,
        credential: str,
    ) -> ProviderRequest:
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=RESPONSE_SCHEMA,
            **_generation_config(target.parameters),
        )
        contents = [
            prompt,
            types.Part.from_bytes(data=image.data, mime_type=image.mime_type),
        ]
        return ProviderRequest(
            url=f"models/{target.model}:generateContent",
            body={"contents": contents, "config": config},
            model=target.model,
            api_key=credential,
        )

    async def send(self, request: ProviderRequest) -> Any:
        client = genai.Client(
            api_key=request.api_key,
            http_options=types.HttpOptions(timeout=settings.google_http_timeout_ms),
        )
        try:
            return await client.aio.models.generate_content(
                model=request.model,
                contents=request.body["contents"],
                config=request.body["config"],
            )
        except genai_errors.APIError as e:
            logger.error(f"[DISPATCH] google returned HTTP {e.code}")
            raise ProviderError(self.name.value, e.code or 500, e.message or str(e)) from e
        except httpx.TransportError as e:
            logger.error(f"[DISPATCH] google transport failure: {e!r}")
            raise NetworkError(self.name.value, e) from e
        finally:
            # One client per request key; release its connection pool
            await client.aio.aclose()

    def extract_text(self, request: ProviderRequest, payload: Any) -> str:
        text = getattr(payload, "text", None)
        return text.strip() if isinstance(text, str) else ""
