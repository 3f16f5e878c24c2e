"""
Central application configuration.

Every tunable value lives here as a typed, documented field.
Any field can be overridden at runtime via an environment variable of the
same name (case-insensitive), e.g.:

    OPENAI_API_KEY=sk-... uvicorn tampercheck.main:app    # deployment default key
    export PROVIDER_TIMEOUT_SEC=300                         # slow reasoning models

A `.env` file at the project root is loaded automatically.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,   # OPENAI_API_KEY == openai_api_key
        extra="ignore",         # silently drop unknown env vars
    )

    # ------------------------------------------------------------------ #
    # Provider selection                                                  #
    # ------------------------------------------------------------------ #
    ai_provider: str = Field(
        "google", description="Provider used when a request does not name one"
    )
    google_model: str = Field(
        "gemini-2.0-flash-exp", description="Default Gemini model"
    )
    openai_model: str = Field(
        "gpt-4o-mini", description="Default OpenAI model"
    )

    # ------------------------------------------------------------------ #
    # Deployment-level default credentials                                #
    # ------------------------------------------------------------------ #
    google_api_key: Optional[str] = Field(
        None, description="Fallback Google AI Studio key"
    )
    openai_api_key: Optional[str] = Field(
        None, description="Fallback OpenAI key"
    )
    azure_openai_api_key: Optional[str] = Field(
        None, description="Fallback Azure OpenAI key"
    )
    bedrock_proxy_url: Optional[str] = Field(
        None, description="Fallback Bedrock OpenAI-compatible proxy URL"
    )

    # ------------------------------------------------------------------ #
    # Azure OpenAI                                                        #
    # ------------------------------------------------------------------ #
    azure_openai_endpoint: Optional[str] = Field(
        None, description="e.g. https://your-resource.openai.azure.com"
    )
    azure_openai_deployment: Optional[str] = Field(
        None, description="Deployment used when a request does not name one"
    )
    azure_openai_api_version: str = Field(
        "2024-08-01-preview", description="api-version query parameter"
    )

    # ------------------------------------------------------------------ #
    # OpenAI routing                                                      #
    # ------------------------------------------------------------------ #
    openai_base_url: str = Field(
        "https://api.openai.com/v1", description="OpenAI REST base URL"
    )
    openai_reasoning_via_responses: bool = Field(
        False,
        description="Send OpenAI reasoning-family models to /responses instead of /chat/completions",
    )

    # ------------------------------------------------------------------ #
    # Network                                                             #
    # ------------------------------------------------------------------ #
    provider_timeout_sec: int = Field(
        180, description="Total timeout for one provider HTTP call (seconds)"
    )
    google_http_timeout_ms: int = Field(
        180_000, description="Gemini SDK HTTP timeout (ms)"
    )
    http_session_timeout_sec: int = Field(
        30, description="Default timeout of the shared aiohttp session (seconds)"
    )

    # ------------------------------------------------------------------ #
    # Uploads                                                             #
    # ------------------------------------------------------------------ #
    max_image_upload_mb: int = Field(
        20, description="Max MB for document image uploads"
    )
    pil_max_image_pixels: int = Field(
        40_000_000, description="PIL decompression-bomb guard (pixels)"
    )

    # ------------------------------------------------------------------ #
    # Credential store                                                    #
    # ------------------------------------------------------------------ #
    credential_ttl_sec: int = Field(
        86_400 * 30, description="Lifetime of a stored session credential (30 days)"
    )
    credential_key_prefix: str = Field(
        "tamperCheck_apiKeys", description="Namespace for stored credentials"
    )
    credential_memory_limit: int = Field(
        1000, description="Max sessions kept by the in-memory credential store"
    )
    upstash_redis_host: Optional[str] = Field(
        None, description="Upstash REST URL; credentials are kept in memory when unset"
    )
    upstash_redis_password: Optional[str] = Field(
        None, description="Upstash REST token"
    )

    # ------------------------------------------------------------------ #
    # Logging                                                             #
    # ------------------------------------------------------------------ #
    log_level: str = Field("INFO", description="Root log level")

    # ------------------------------------------------------------------ #
    # Derived byte-level properties (computed from MB fields)             #
    # ------------------------------------------------------------------ #
    @property
    def max_image_upload_bytes(self) -> int:
        return self.max_image_upload_mb * 1024 * 1024


# Single shared instance; import this everywhere.
settings = Settings()
