"""Shared pydantic base for request/response schemas."""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base model that speaks camelCase on the wire.

    Fields are declared in snake_case; JSON uses camelCase aliases. Input accepts
    either spelling.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    """Plain confirmation message."""

    message: str
