"""Workout, step and repetition block models."""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any

from pydantic import ConfigDict, Discriminator, Field, Tag, model_validator

from kaiord.krd.base import KrdModel, RawExtensionBag
from kaiord.krd.duration import Duration, DurationType
from kaiord.krd.target import Target, TargetType


class Sport(StrEnum):
    RUNNING = "running"
    CYCLING = "cycling"
    SWIMMING = "swimming"
    GENERIC = "generic"


class Intensity(StrEnum):
    WARMUP = "warmup"
    ACTIVE = "active"
    COOLDOWN = "cooldown"
    REST = "rest"
    RECOVERY = "recovery"
    INTERVAL = "interval"
    OTHER = "other"


class ExtensionSlot(KrdModel):
    """Per-format extension payloads attached to a step or workout.

    Only ``tcx`` is interpreted here; payloads for other formats are kept
    untouched as extra keys.
    """

    model_config = ConfigDict(extra="allow")

    tcx: RawExtensionBag | None = None


# (kind field, payload field) pairs kept in sync on every step
_SYNCED_TYPE_FIELDS = (
    ("duration_type", "durationType", "duration"),
    ("target_type", "targetType", "target"),
)


class WorkoutStep(KrdModel):
    """A single workout step.

    ``duration_type`` and ``target_type`` mirror ``duration.type`` and
    ``target.type``. They are filled in when omitted and a mismatch is
    rejected.
    """

    step_index: int = Field(..., ge=0)
    duration_type: DurationType
    duration: Duration
    target_type: TargetType
    target: Target
    intensity: Intensity | None = None
    name: str | None = None
    notes: str | None = None
    extensions: ExtensionSlot | None = None

    @model_validator(mode="before")
    @classmethod
    def _sync_type_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for field_name, alias, payload_key in _SYNCED_TYPE_FIELDS:
            payload = data.get(payload_key)
            kind = payload.get("type") if isinstance(payload, dict) else getattr(payload, "type", None)
            if kind is None:
                continue
            declared = data.pop(alias, None)
            snake = data.pop(field_name, None)
            declared = declared if declared is not None else snake
            if declared is not None and str(declared) != str(kind):
                raise ValueError(f"{alias} '{declared}' does not match {payload_key}.type '{kind}'")
            data[alias] = kind
        return data


class RepetitionBlock(KrdModel):
    """Repeat an ordered list of steps ``repeat_count`` times.

    Blocks never nest. ``id`` is the block's stable handle; it is assigned
    once and never changes.
    """

    id: str | None = None
    repeat_count: int = Field(..., ge=1)
    steps: list[WorkoutStep] = Field(default_factory=list)


def _entry_kind(value: Any) -> str:
    if isinstance(value, dict):
        return "block" if "repeatCount" in value or "repeat_count" in value else "step"
    return "block" if isinstance(value, RepetitionBlock) else "step"


WorkoutEntry = Annotated[
    Annotated[WorkoutStep, Tag("step")] | Annotated[RepetitionBlock, Tag("block")],
    Discriminator(_entry_kind),
]


class Workout(KrdModel):
    """Structured workout: an ordered list of steps and repetition blocks."""

    name: str | None = None
    sport: str = Sport.GENERIC.value
    sub_sport: str | None = None
    steps: list[WorkoutEntry] = Field(default_factory=list)
    extensions: ExtensionSlot | None = None
