"""
Provider contract and the OpenAI-compatible request/response shapes.

A provider turns (prompt, image, model target, credential) into exactly one
network call and returns the model's raw text. Parsing that text is the
normalizer's job, not the provider's.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import aiohttp

from tampercheck.config import settings
from tampercheck.core.errors import NetworkError, ProviderError
from tampercheck.core.images import DocumentImage
from tampercheck.core.parameters import to_wire_parameters
from tampercheck.integrations import http_client
from tampercheck.integrations.prompts import SYSTEM_MESSAGE
from tampercheck.schemas.options import Provider
from tampercheck.schemas.parameters import Endpoint, GenerationParameters, ModelFamily

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelTarget:
    """Which model to call and with what generation parameters."""

    model: str
    family: ModelFamily
    parameters: GenerationParameters
    deployment: Optional[str] = None


@dataclass
class ProviderRequest:
    url: str
    body: Dict[str, Any]
    model: str
    endpoint: Optional[Endpoint] = None
    headers: Dict[str, str] = field(default_factory=dict, repr=False)
    api_key: Optional[str] = field(default=None, repr=False)


# ---------------------------------------------------------------------------
# OpenAI-compatible request bodies
# ---------------------------------------------------------------------------


def chat_messages(prompt: str, image: DocumentImage) -> List[Dict[str, Any]]:
    return [
        {"role": "system", "content": SYSTEM_MESSAGE},
        {
            "role": "user",
            "content": [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": image.to_data_url()}},
            ],
        },
    ]


def chat_body(
    prompt: str,
    image: DocumentImage,
    parameters: GenerationParameters,
    model: Optional[str] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {}
    if model:
        body["model"] = model
    body["response_format"] = {"type": "json_object"}
    body["messages"] = chat_messages(prompt, image)
    # Parameters may override response_format
    body.update(to_wire_parameters(parameters, Endpoint.CHAT))
    return body


def responses_body(
    prompt: str,
    image: DocumentImage,
    parameters: GenerationParameters,
    model: Optional[str] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {}
    if model:
        body["model"] = model
    body["input"] = [
        {
            "role": "user",
            "content": [
                {"type": "input_text", "text": prompt},
                {"type": "input_image", "image_url": image.to_data_url()},
            ],
        }
    ]
    body.update(to_wire_parameters(parameters, Endpoint.RESPONSES))
    return body


# ---------------------------------------------------------------------------
# Response text extraction
# ---------------------------------------------------------------------------


def extract_chat_text(payload: Any) -> str:
    try:
        content = payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    return content.strip() if isinstance(content, str) else ""


def extract_responses_text(payload: Any) -> str:
    if not isinstance(payload, dict):
        return ""

    output = payload.get("output")
    if isinstance(output, list):
        message = next(
            (item for item in output if isinstance(item, dict) and item.get("type") == "message"),
            None,
        )
        if message and isinstance(message.get("content"), list):
            part = next(
                (
                    c for c in message["content"]
                    if isinstance(c, dict) and c.get("type") == "output_text"
                ),
                None,
            )
            if part and isinstance(part.get("text"), str) and part["text"].strip():
                return part["text"].strip()

    fallback = payload.get("output_text")
    return fallback.strip() if isinstance(fallback, str) else ""


# ---------------------------------------------------------------------------
# Provider interface
# ---------------------------------------------------------------------------


class BaseProvider(ABC):
    """One AI vendor. Subclasses build the request; the default send is a JSON POST."""

    name: Provider

    @abstractmethod
    def default_model(self) -> str:
        """Model used when the request does not name one."""

    def endpoint_for(self, family: ModelFamily) -> Endpoint:
        return Endpoint.RESPONSES if family == ModelFamily.REASONING else Endpoint.CHAT

    @abstractmethod
    def build_request(
        self,
        prompt: str,
        image: DocumentImage,
        target: ModelTarget,
        credential: str,
    ) -> ProviderRequest:
        """Assemble the single outbound request."""

    def extract_text(self, request: ProviderRequest, payload: Any) -> str:
        if request.endpoint == Endpoint.RESPONSES:
            return extract_responses_text(payload)
        return extract_chat_text(payload)

    def decode(self, body: str) -> Any:
        try:
            return json.loads(body)
        except ValueError:
            logger.warning(f"[DISPATCH] {self.name.value} returned a non-JSON success body")
            return {}

    async def send(self, request: ProviderRequest) -> Any:
        timeout = aiohttp.ClientTimeout(total=settings.provider_timeout_sec)
        try:
            async with http_client.request_session() as sess:
                async with sess.post(
                    request.url,
                    json=request.body,
                    headers=request.headers,
                    timeout=timeout,
                ) as response:
                    text = await response.text()
                    status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"[DISPATCH] {self.name.value} transport failure: {e!r}")
            raise NetworkError(self.name.value, e) from e

        if not 200 <= status < 300:
            logger.error(f"[DISPATCH] {self.name.value} returned HTTP {status}")
            raise ProviderError(self.name.value, status, text)

        return self.decode(text)

    async def generate(
        self,
        prompt: str,
        image: DocumentImage,
        target: ModelTarget,
        credential: str,
    ) -> str:
        """Build, send and extract. Returns the model's raw text ("" when absent)."""
        request = self.build_request(prompt, image, target, credential)
        logger.info(
            f"[DISPATCH] provider={self.name.value} model={request.model} "
            f"family={target.family.value} "
            f"endpoint={request.endpoint.value if request.endpoint else 'sdk'}"
        )
        payload = await self.send(request)
        return self.extract_text(request, payload)
