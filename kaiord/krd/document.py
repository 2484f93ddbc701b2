"""KRD document envelope."""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import ConfigDict, Field, ValidationError

from kaiord.errors import KrdValidationError
from kaiord.krd.base import KrdModel, RawExtensionBag
from kaiord.krd.workout import Workout

KRD_VERSION = "1.0"


class KrdMetadata(KrdModel):
    """Document metadata. Every field is optional."""

    created: str | None = None
    sport: str | None = None
    sub_sport: str | None = None
    manufacturer: str | None = None
    product: str | None = None
    serial_number: str | None = None


class KrdExtensions(KrdModel):
    """Document extensions: the structured workout plus per-format bags."""

    model_config = ConfigDict(extra="allow")

    workout: Workout | None = None
    tcx: RawExtensionBag | None = None


class KRD(KrdModel):
    """KRD workout document."""

    version: Literal["1.0"] = KRD_VERSION
    type: Literal["workout"] = "workout"
    metadata: KrdMetadata = Field(default_factory=KrdMetadata)
    extensions: KrdExtensions = Field(default_factory=KrdExtensions)

    @property
    def workout(self) -> Workout | None:
        return self.extensions.workout

    def with_workout(self, workout: Workout) -> KRD:
        """Return a copy of this document carrying ``workout``."""
        extensions = self.extensions.model_copy(update={"workout": workout})
        return self.model_copy(update={"extensions": extensions})

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_krd(), indent=indent, ensure_ascii=False)


def load_krd(data: dict[str, Any] | str) -> KRD:
    """Load a KRD document from a dict or JSON text.

    Raises:
        KrdValidationError: If the input is not a valid KRD document
    """
    try:
        if isinstance(data, str):
            return KRD.model_validate_json(data)
        return KRD.model_validate(data)
    except ValidationError as e:
        raise KrdValidationError(f"Invalid KRD document: {e}") from e
