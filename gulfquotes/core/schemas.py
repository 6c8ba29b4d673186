"""Shared Pydantic base models.

The web client speaks camelCase, so API models alias every field with
``to_camel`` and accept either spelling on input.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base for request/response bodies exchanged with the web client."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def dump(self) -> dict[str, Any]:
        """JSON-ready camelCase dictionary."""
        return self.model_dump(mode="json", by_alias=True)
