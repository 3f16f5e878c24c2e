"""AWS Bedrock through an OpenAI-compatible proxy; the credential is the proxy URL."""

from typing import Any

from tampercheck.core.images import DocumentImage
from tampercheck.integrations.providers.base import (
    BaseProvider,
    ModelTarget,
    ProviderRequest,
    chat_messages,
)
from tampercheck.schemas.options import Provider
from tampercheck.schemas.parameters import Endpoint, ModelFamily


class BedrockOpenAIProvider(BaseProvider):
    name = Provider.BEDROCK_OPENAI

    def default_model(self) -> str:
        return "bedrock-proxy"

    def endpoint_for(self, family: ModelFamily) -> Endpoint:
        return Endpoint.CHAT

    def build_request(
        self,
        prompt: str,
        image: DocumentImage,
        target: ModelTarget,
        credential: str,
    ) -> ProviderRequest:
        return ProviderRequest(
            url=credential,
            body={"provider": "openai", "messages": chat_messages(prompt, image)},
            model=target.model,
            endpoint=Endpoint.CHAT,
            headers={"Content-Type": "application/json"},
        )

    def decode(self, body: str) -> Any:
        # The proxy answers with the model text itself
        return body

    def extract_text(self, request: ProviderRequest, payload: Any) -> str:
        return payload.strip() if isinstance(payload, str) else ""
