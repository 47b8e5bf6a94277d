"""Shared pydantic base schemas."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema that speaks camelCase on the wire.

    Fields are declared in snake_case; JSON input is accepted in either
    form and responses are serialized with camelCase aliases.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SuccessResponse(CamelModel):
    """Generic acknowledgement envelope."""

    success: bool = True
    message: str | None = None
