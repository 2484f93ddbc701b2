"""Step duration kinds.

A duration is a discriminated union keyed on ``type``. ``time``, ``distance``
and ``open`` are the kinds TCX expresses natively; the remaining kinds are
carried through TCX with kaiord vendor attributes.

Threshold payloads on the conditional kinds are optional: a step authored
without a threshold is still a valid step, it just has nothing to preserve.
Numeric bounds are enforced at the editing boundary, not here.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import Field, TypeAdapter

from kaiord.krd.base import KrdModel, Number


class DurationType(StrEnum):
    """Duration kind names."""

    TIME = "time"
    DISTANCE = "distance"
    OPEN = "open"
    HEART_RATE_LESS_THAN = "heart_rate_less_than"
    CALORIES = "calories"
    POWER_LESS_THAN = "power_less_than"
    POWER_GREATER_THAN = "power_greater_than"
    REPEAT_UNTIL_TIME = "repeat_until_time"
    REPEAT_UNTIL_DISTANCE = "repeat_until_distance"
    REPEAT_UNTIL_CALORIES = "repeat_until_calories"
    REPEAT_UNTIL_HEART_RATE_GREATER_THAN = "repeat_until_heart_rate_greater_than"
    REPEAT_UNTIL_HEART_RATE_LESS_THAN = "repeat_until_heart_rate_less_than"
    REPEAT_UNTIL_POWER_LESS_THAN = "repeat_until_power_less_than"
    REPEAT_UNTIL_POWER_GREATER_THAN = "repeat_until_power_greater_than"


class TimeDuration(KrdModel):
    """Time-based duration."""

    type: Literal["time"] = "time"
    seconds: Number = Field(..., ge=0, description="Duration in seconds")


class DistanceDuration(KrdModel):
    """Distance-based duration."""

    type: Literal["distance"] = "distance"
    meters: Number = Field(..., ge=0, description="Distance in meters")


class OpenDuration(KrdModel):
    """Open-ended duration (until lap button)."""

    type: Literal["open"] = "open"


class HeartRateLessThanDuration(KrdModel):
    type: Literal["heart_rate_less_than"] = "heart_rate_less_than"
    bpm: Number | None = Field(None, ge=0)


class CaloriesDuration(KrdModel):
    type: Literal["calories"] = "calories"
    calories: Number | None = Field(None, ge=0)


class PowerLessThanDuration(KrdModel):
    type: Literal["power_less_than"] = "power_less_than"
    watts: Number | None = Field(None, ge=0)


class PowerGreaterThanDuration(KrdModel):
    type: Literal["power_greater_than"] = "power_greater_than"
    watts: Number | None = Field(None, ge=0)


class RepeatUntilTimeDuration(KrdModel):
    """Repeat from ``repeat_from`` until the elapsed time is reached."""

    type: Literal["repeat_until_time"] = "repeat_until_time"
    seconds: Number = Field(..., ge=0)
    repeat_from: int = Field(..., ge=0, description="Step index to loop back to")


class RepeatUntilDistanceDuration(KrdModel):
    type: Literal["repeat_until_distance"] = "repeat_until_distance"
    meters: Number = Field(..., ge=0)
    repeat_from: int = Field(..., ge=0)


class RepeatUntilCaloriesDuration(KrdModel):
    type: Literal["repeat_until_calories"] = "repeat_until_calories"
    calories: Number = Field(..., ge=0)
    repeat_from: int = Field(..., ge=0)


class RepeatUntilHeartRateGreaterThanDuration(KrdModel):
    type: Literal["repeat_until_heart_rate_greater_than"] = "repeat_until_heart_rate_greater_than"
    bpm: Number = Field(..., ge=0)
    repeat_from: int = Field(..., ge=0)


class RepeatUntilHeartRateLessThanDuration(KrdModel):
    type: Literal["repeat_until_heart_rate_less_than"] = "repeat_until_heart_rate_less_than"
    bpm: Number = Field(..., ge=0)
    repeat_from: int = Field(..., ge=0)


class RepeatUntilPowerLessThanDuration(KrdModel):
    type: Literal["repeat_until_power_less_than"] = "repeat_until_power_less_than"
    watts: Number = Field(..., ge=0)
    repeat_from: int = Field(..., ge=0)


class RepeatUntilPowerGreaterThanDuration(KrdModel):
    type: Literal["repeat_until_power_greater_than"] = "repeat_until_power_greater_than"
    watts: Number = Field(..., ge=0)
    repeat_from: int = Field(..., ge=0)


Duration = Annotated[
    TimeDuration
    | DistanceDuration
    | OpenDuration
    | HeartRateLessThanDuration
    | CaloriesDuration
    | PowerLessThanDuration
    | PowerGreaterThanDuration
    | RepeatUntilTimeDuration
    | RepeatUntilDistanceDuration
    | RepeatUntilCaloriesDuration
    | RepeatUntilHeartRateGreaterThanDuration
    | RepeatUntilHeartRateLessThanDuration
    | RepeatUntilPowerLessThanDuration
    | RepeatUntilPowerGreaterThanDuration,
    Field(discriminator="type"),
]

DURATION_ADAPTER: TypeAdapter[Duration] = TypeAdapter(Duration)


def parse_duration(data: object) -> Duration:
    """Validate a raw mapping into a typed duration.

    Raises:
        pydantic.ValidationError: If the mapping is not a valid duration
    """
    return DURATION_ADAPTER.validate_python(data)
