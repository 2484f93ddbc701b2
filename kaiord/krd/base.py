"""Shared pydantic configuration for KRD models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

Number = int | float

# Vendor XML content stored verbatim, order preserving.
RawExtensionBag = dict[str, Any]


class KrdModel(BaseModel):
    """Immutable model serialized with camelCase keys.

    Attributes use snake_case in Python; the KRD wire format uses camelCase
    (``stepIndex``, ``repeatCount``). Both spellings are accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_krd(self) -> dict[str, Any]:
        """Dump as a KRD-shaped dict (camelCase keys, absent fields omitted)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
