"""
Azure-hosted OpenAI deployments.

The deployment is part of the URL, so request bodies carry no `model` field.
Reasoning-family deployments are called through the responses endpoint.
"""

from tampercheck.config import settings
from tampercheck.core.errors import MissingCredential
from tampercheck.core.images import DocumentImage
from tampercheck.integrations.providers.base import (
    BaseProvider,
    ModelTarget,
    ProviderRequest,
    chat_body,
    responses_body,
)
from tampercheck.schemas.options import Provider
from tampercheck.schemas.parameters import Endpoint


class AzureOpenAIProvider(BaseProvider):
    name = Provider.AZURE_OPENAI

    def default_model(self) -> str:
        # The model defaults to the deployment name; the service fills it in
        return settings.azure_openai_deployment or ""

    def build_request(
        self,
        prompt: str,
        image: DocumentImage,
        target: ModelTarget,
        credential: str,
    ) -> ProviderRequest:
        resource = settings.azure_openai_endpoint
        if not resource or not target.deployment:
            raise MissingCredential(
                self.name.value,
                "Azure OpenAI configuration missing. Set AZURE_OPENAI_ENDPOINT and "
                "AZURE_OPENAI_DEPLOYMENT, or name a deployment in the configuration.",
            )

        endpoint = self.endpoint_for(target.family)
        build = responses_body if endpoint == Endpoint.RESPONSES else chat_body

        return ProviderRequest(
            url=(
                f"{resource.rstrip('/')}/openai/deployments/{target.deployment}/"
                f"{endpoint.value}?api-version={settings.azure_openai_api_version}"
            ),
            body=build(prompt, image, target.parameters),
            model=target.model,
            endpoint=endpoint,
            headers={"Content-Type": "application/json", "api-key": credential},
            api_key=credential,
        )
