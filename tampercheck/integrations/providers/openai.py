"""OpenAI REST API (chat completions, optionally responses for reasoning models)."""

from tampercheck.config import settings
from tampercheck.core.images import DocumentImage
from tampercheck.integrations.providers.base import (
    BaseProvider,
    ModelTarget,
    ProviderRequest,
    chat_body,
    responses_body,
)
from tampercheck.schemas.options import Provider
from tampercheck.schemas.parameters import Endpoint, ModelFamily


class OpenAIProvider(BaseProvider):
    name = Provider.OPENAI

    def default_model(self) -> str:
        return settings.openai_model

    def endpoint_for(self, family: ModelFamily) -> Endpoint:
        if family == ModelFamily.REASONING and settings.openai_reasoning_via_responses:
            return Endpoint.RESPONSES
        return Endpoint.CHAT

    def build_request(
        self,
        prompt: str,
        image: DocumentImage,
        target: ModelTarget,
        credential: str,
    ) -> ProviderRequest:
        endpoint = self.endpoint_for(target.family)
        build = responses_body if endpoint == Endpoint.RESPONSES else chat_body

        return ProviderRequest(
            url=f"{settings.openai_base_url.rstrip('/')}/{endpoint.value}",
            body=build(prompt, image, target.parameters, model=target.model),
            model=target.model,
            endpoint=endpoint,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {credential}",
            },
            api_key=credential,
        )
