"""
Generation parameter shapes, one per model family.

The three models form a tagged union on `family`. Ranges are enforced on
construction; out-of-range input is a configuration error and is never
clamped here.
"""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ModelFamily(str, Enum):
    STANDARD = "standard"
    EXTENDED_CONTEXT = "extended-context"
    REASONING = "reasoning"


class Endpoint(str, Enum):
    CHAT = "chat/completions"
    RESPONSES = "responses"


class _ParameterModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )


class StandardParameters(_ParameterModel):
    """Vision-chat models (GPT-4o and anything unrecognised)."""
    family: Literal["standard"] = "standard"
    temperature: float = Field(0.1, ge=0, le=2)
    top_p: float = Field(1.0, ge=0, le=1)
    frequency_penalty: float = Field(0.0, ge=-2, le=2)
    presence_penalty: float = Field(0.0, ge=-2, le=2)
    max_tokens: int = Field(4000, ge=1, le=32768)


class ExtendedContextParameters(_ParameterModel):
    """GPT-5 / GPT-4.1 models: max_completion_tokens plus an output format."""
    family: Literal["extended-context"] = "extended-context"
    temperature: float = Field(0.1, ge=0, le=2)
    top_p: float = Field(1.0, ge=0, le=1)
    frequency_penalty: float = Field(0.0, ge=-2, le=2)
    presence_penalty: float = Field(0.0, ge=-2, le=2)
    max_completion_tokens: int = Field(4000, ge=1, le=32768)
    response_format: Literal["text", "json_object"] = "json_object"


class ReasoningParameters(_ParameterModel):
    """o-series models. No sampling parameters exist for this family."""
    family: Literal["reasoning"] = "reasoning"
    max_output_tokens: int = Field(4000, ge=1, le=32768)
    reasoning_effort: Literal["low", "medium", "high"] = "medium"


GenerationParameters = Annotated[
    Union[StandardParameters, ExtendedContextParameters, ReasoningParameters],
    Field(discriminator="family"),
]
