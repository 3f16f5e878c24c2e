"""
Model catalogue route: /api/v1/models

Everything the configuration UI needs to render provider and parameter
controls, without exposing any credential.
"""

from fastapi import APIRouter

from tampercheck.core import credentials as creds
from tampercheck.core.parameters import (
    MODEL_CATEGORIES,
    PARAMETER_CONSTRAINTS,
    available_parameters,
    default_parameters,
)
from tampercheck.integrations.providers.registry import PROVIDERS
from tampercheck.schemas.options import Provider

router = APIRouter(prefix="/api/v1", tags=["Models"])


@router.get("/models")
async def list_models():
    categories = [
        {
            "key": key,
            "models": category["models"],
            "family": category["family"].value,
            "endpoint": category["endpoint"].value,
            "description": category["description"],
            "defaultParameters": default_parameters(category["family"]).model_dump(by_alias=True),
            "availableParameters": available_parameters(category["family"]),
        }
        for key, category in MODEL_CATEGORIES.items()
    ]

    providers = [
        {
            "provider": provider.value,
            "defaultModel": PROVIDERS[provider].default_model() or None,
            "label": creds.api_key_label(provider),
            "placeholder": creds.api_key_placeholder(provider),
            "description": creds.api_key_description(provider),
            "available": creds.is_credential_available(provider),
        }
        for provider in Provider
    ]

    return {
        "categories": categories,
        "constraints": PARAMETER_CONSTRAINTS,
        "providers": providers,
    }
