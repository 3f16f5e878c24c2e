"""
Model family classification and generation-parameter mapping.

`classify` is a static lookup; any model name not listed falls back to the
standard family. `to_wire_parameters` only renames fields to the provider's
wire names and drops the ones a family does not accept.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError

from tampercheck.core.errors import InvalidParameters
from tampercheck.schemas.parameters import (
    Endpoint,
    ExtendedContextParameters,
    GenerationParameters,
    ModelFamily,
    ReasoningParameters,
    StandardParameters,
)

logger = logging.getLogger(__name__)


MODEL_CATEGORIES: Dict[str, Dict[str, Any]] = {
    "gpt-4o": {
        "models": ["gpt-4o", "gpt-4o-mini", "gpt-4-vision-preview"],
        "family": ModelFamily.STANDARD,
        "endpoint": Endpoint.CHAT,
        "description": "Standard GPT-4o models with vision capabilities",
    },
    "gpt-5": {
        "models": ["gpt-5", "gpt-5-mini", "gpt-4.1-mini", "gpt-4.1-nano"],
        "family": ModelFamily.EXTENDED_CONTEXT,
        "endpoint": Endpoint.CHAT,
        "description": "GPT-5 series models requiring max_completion_tokens",
    },
    "o-series": {
        "models": ["o4-mini", "o3"],
        "family": ModelFamily.REASONING,
        "endpoint": Endpoint.RESPONSES,
        "description": "Advanced reasoning models with chain-of-thought capabilities",
    },
    "legacy": {
        "models": ["model-router"],
        "family": ModelFamily.STANDARD,
        "endpoint": Endpoint.CHAT,
        "description": "Legacy and specialized routing models",
    },
}

_FALLBACK_CATEGORY = "legacy"

_PARAMETER_MODELS: Dict[ModelFamily, Type[BaseModel]] = {
    ModelFamily.STANDARD: StandardParameters,
    ModelFamily.EXTENDED_CONTEXT: ExtendedContextParameters,
    ModelFamily.REASONING: ReasoningParameters,
}

# Declared ranges, keyed by the camelCase names the UI uses.
PARAMETER_CONSTRAINTS: Dict[str, Dict[str, float]] = {
    "temperature": {"min": 0, "max": 2, "step": 0.1},
    "topP": {"min": 0, "max": 1, "step": 0.1},
    "frequencyPenalty": {"min": -2, "max": 2, "step": 0.1},
    "presencePenalty": {"min": -2, "max": 2, "step": 0.1},
    "maxTokens": {"min": 1, "max": 32768, "step": 1},
    "maxCompletionTokens": {"min": 1, "max": 32768, "step": 1},
    "maxOutputTokens": {"min": 1, "max": 32768, "step": 1},
}

_SAMPLING = ["temperature", "topP", "frequencyPenalty", "presencePenalty"]


def model_category(model_name: Optional[str]) -> Dict[str, Any]:
    for key, category in MODEL_CATEGORIES.items():
        if model_name in category["models"]:
            return {"key": key, **category}
    return {"key": _FALLBACK_CATEGORY, **MODEL_CATEGORIES[_FALLBACK_CATEGORY]}


def classify(model_name: Optional[str]) -> ModelFamily:
    """Map a model name to its family. Unknown names are treated as standard."""
    return model_category(model_name)["family"]


def default_parameters(family: ModelFamily) -> GenerationParameters:
    return _PARAMETER_MODELS[family]()


def available_parameters(family: ModelFamily) -> List[str]:
    if family == ModelFamily.STANDARD:
        return [*_SAMPLING, "maxTokens"]
    if family == ModelFamily.EXTENDED_CONTEXT:
        return [*_SAMPLING, "maxCompletionTokens", "responseFormat"]
    return ["maxOutputTokens", "reasoningEffort"]


def validate_parameter(name: str, value: float) -> Tuple[bool, Optional[str]]:
    constraint = PARAMETER_CONSTRAINTS.get(name)
    if not constraint:
        return True, None

    if value < constraint["min"] or value > constraint["max"]:
        return False, f"Value must be between {constraint['min']} and {constraint['max']}"
    return True, None


def _range_errors(payload: Dict[str, Any]) -> List[str]:
    errors = []
    for name, value in payload.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        ui_name = re.sub(r"_([a-z])", lambda m: m.group(1).upper(), name)
        ok, message = validate_parameter(ui_name, value)
        if not ok:
            errors.append(f"{name}: {message}")
    return errors


def parse_parameters(
    family: ModelFamily,
    raw: Optional[Dict[str, Any]] = None,
) -> GenerationParameters:
    """
    Build the parameter record for `family`, filling defaults for missing fields.

    Raises InvalidParameters for out-of-range values, unknown fields or a
    `family` tag that disagrees with the model. Sampling fields on a
    reasoning config are dropped, not rejected.
    """
    if not raw:
        return default_parameters(family)

    model_cls = _PARAMETER_MODELS[family]
    payload = dict(raw)
    # Accept the UI's nested {"modelType": ..., "parameters": {...}} shape too
    if isinstance(payload.get("parameters"), dict):
        payload = dict(payload["parameters"])
    payload.pop("modelType", None)
    # Kept in the UI for display only
    payload.pop("reasoningStrategy", None)
    if family == ModelFamily.REASONING:
        # The UI keeps sampling values on o-series configs; they are never sent
        for name in (*_SAMPLING, "top_p", "frequency_penalty", "presence_penalty"):
            payload.pop(name, None)

    if "family" in payload and payload["family"] != family.value:
        raise InvalidParameters([
            f"parameters are for the '{payload['family']}' family, "
            f"but the model belongs to '{family.value}'"
        ])

    range_errors = _range_errors(payload)
    if range_errors:
        logger.warning(f"[PARAMETERS] Rejected {family.value} parameters: {range_errors}")
        raise InvalidParameters(range_errors)

    try:
        return model_cls.model_validate(payload)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(p) for p in err['loc']) or 'parameters'}: {err['msg']}"
            for err in e.errors()
        ]
        logger.warning(f"[PARAMETERS] Rejected {family.value} parameters: {errors}")
        raise InvalidParameters(errors) from e


def to_wire_parameters(
    parameters: GenerationParameters,
    endpoint: Optional[Endpoint] = None,
) -> Dict[str, Any]:
    """
    Rename parameters to OpenAI-compatible wire fields.

    Reasoning models take `max_output_tokens` + `reasoning.effort` on the
    responses endpoint and `max_completion_tokens` + `reasoning_effort` on
    chat completions. Sampling fields are never emitted for them.
    """
    if isinstance(parameters, ReasoningParameters):
        if endpoint == Endpoint.CHAT:
            return {
                "max_completion_tokens": parameters.max_output_tokens,
                "reasoning_effort": parameters.reasoning_effort,
            }
        return {
            "max_output_tokens": parameters.max_output_tokens,
            "reasoning": {"effort": parameters.reasoning_effort},
        }

    base = {
        "temperature": parameters.temperature,
        "top_p": parameters.top_p,
        "frequency_penalty": parameters.frequency_penalty,
        "presence_penalty": parameters.presence_penalty,
    }

    if isinstance(parameters, ExtendedContextParameters):
        return {
            **base,
            "max_completion_tokens": parameters.max_completion_tokens,
            "response_format": {"type": parameters.response_format},
        }

    return {**base, "max_tokens": parameters.max_tokens}
