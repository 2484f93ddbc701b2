"""Step target kinds.

Targets are a discriminated union keyed on ``type``. Every target except
``open`` and ``stroke_type`` carries a ``value`` that is itself a union keyed
on ``unit``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import Field, TypeAdapter, model_validator

from kaiord.krd.base import KrdModel, Number


class TargetType(StrEnum):
    """Target kind names."""

    OPEN = "open"
    HEART_RATE = "heart_rate"
    POWER = "power"
    PACE = "pace"
    CADENCE = "cadence"
    STROKE_TYPE = "stroke_type"


class SwimStroke(StrEnum):
    FREESTYLE = "freestyle"
    BACKSTROKE = "backstroke"
    BREASTSTROKE = "breaststroke"
    BUTTERFLY = "butterfly"
    DRILL = "drill"
    MIXED = "mixed"
    IM = "im"


class ZoneValue(KrdModel):
    """Coarse ordinal training zone."""

    unit: Literal["zone"] = "zone"
    value: int = Field(..., ge=1)


class AbsoluteValue(KrdModel):
    """Single absolute or relative value (bpm, watts, m/s, rpm, percentages)."""

    unit: Literal["bpm", "watts", "mps", "rpm", "percent_ftp", "percent_max"]
    value: Number = Field(..., ge=0)


class RangeValue(KrdModel):
    """Inclusive low/high range."""

    unit: Literal["range"] = "range"
    min: Number = Field(..., ge=0)
    max: Number = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> RangeValue:
        if self.min > self.max:
            raise ValueError(f"range min ({self.min}) must not exceed max ({self.max})")
        return self


TargetValue = Annotated[ZoneValue | AbsoluteValue | RangeValue, Field(discriminator="unit")]


class OpenTarget(KrdModel):
    type: Literal["open"] = "open"


class HeartRateTarget(KrdModel):
    type: Literal["heart_rate"] = "heart_rate"
    value: TargetValue


class PowerTarget(KrdModel):
    type: Literal["power"] = "power"
    value: TargetValue


class PaceTarget(KrdModel):
    type: Literal["pace"] = "pace"
    value: TargetValue


class CadenceTarget(KrdModel):
    type: Literal["cadence"] = "cadence"
    value: TargetValue


class StrokeTypeTarget(KrdModel):
    """Swim stroke target (swimming only)."""

    type: Literal["stroke_type"] = "stroke_type"
    stroke: SwimStroke


Target = Annotated[
    OpenTarget | HeartRateTarget | PowerTarget | PaceTarget | CadenceTarget | StrokeTypeTarget,
    Field(discriminator="type"),
]

TARGET_ADAPTER: TypeAdapter[Target] = TypeAdapter(Target)


def parse_target(data: object) -> Target:
    """Validate a raw mapping into a typed target."""
    return TARGET_ADAPTER.validate_python(data)
