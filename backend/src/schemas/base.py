"""Shared pydantic configuration for API schemas."""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base schema exposing camelCase field names on the wire.

    Accepts both alias and field names on input so cached JSON (written with
    aliases) and ORM objects validate alike.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
