"""Shared base for API schemas: camelCase on the wire, snake_case accepted on input."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serializes by camelCase alias; populates from either alias or field name."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
