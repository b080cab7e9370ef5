"""Error envelope schemas returned by every failing request."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import SerializerFunctionWrapHandler
from pydantic import model_serializer
from pydantic.alias_generators import to_camel


class ErrorProperties(BaseModel):
    """Generic properties attached to every envelope."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    timestamp: str
    correlation_id: str | None = None


class ErrorEnvelope(BaseModel):
    """Canonical error payload, also used for nested field-level details."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    code: str
    message: str
    properties: ErrorProperties
    details: tuple[ErrorEnvelope, ...] | None = None

    @model_serializer(mode="wrap")
    def _omit_empty_details(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        if not self.details:
            data.pop("details", None)
        return data

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-ready body with wire key names."""
        return self.model_dump(mode="json", by_alias=True)
