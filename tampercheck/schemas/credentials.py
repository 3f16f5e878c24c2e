from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class StoreCredentialRequest(BaseModel):
    value: str


class CredentialStatus(BaseModel):
    """What the UI may know about one provider's credential. Never the raw value."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    provider: str
    label: str
    stored: bool
    masked: Optional[str] = None
    valid_format: bool = False
    available: bool
    warning: Optional[str] = None
