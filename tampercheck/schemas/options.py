from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Provider(str, Enum):
    GOOGLE = "google"
    OPENAI = "openai"
    AZURE_OPENAI = "azure-openai"
    BEDROCK_OPENAI = "bedrock-openai"


class ApiKeys(BaseModel):
    """User-supplied credentials, one optional slot per provider."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    google: Optional[str] = None
    openai: Optional[str] = None
    azure_openai: Optional[str] = None
    bedrock_proxy: Optional[str] = None

    def for_provider(self, provider: Provider) -> Optional[str]:
        return {
            Provider.GOOGLE: self.google,
            Provider.OPENAI: self.openai,
            Provider.AZURE_OPENAI: self.azure_openai,
            Provider.BEDROCK_OPENAI: self.bedrock_proxy,
        }[provider]


class AnalyzeConfig(BaseModel):
    """
    Per-request model configuration.

    `provider` stays a plain string so an unknown name reaches the dispatcher
    and is reported as UnsupportedProvider instead of a schema error.
    `parameters` is validated against the model family at dispatch time.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    provider: Optional[str] = None
    model: Optional[str] = None
    azure_deployment: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None
    api_keys: ApiKeys = Field(default_factory=ApiKeys)
