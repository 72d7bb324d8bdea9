"""
Shared schema configuration.

WHAT: Base model for request/response schemas with camelCase JSON keys.

WHY: API clients send and receive camelCase (projectId, unitPrice) while
the Python side stays snake_case. populate_by_name also accepts
snake_case keys on input.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serializing field names as camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
