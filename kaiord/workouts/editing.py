"""Editing boundary: domain bounds and type-synchronized step updates.

The codecs accept any well-typed value. Limits that only make sense for
athlete input (a 220 bpm ceiling, at most 24 hours of repeat time) are
checked here, when a step is edited.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from kaiord.errors import BlockNotFoundError, FieldViolation, KrdValidationError, StepNotFoundError
from kaiord.krd.duration import Duration, DurationType, parse_duration
from kaiord.krd.target import AbsoluteValue, RangeValue, Target, TargetType, ZoneValue, parse_target
from kaiord.krd.workout import Workout, WorkoutStep
from kaiord.workouts.blocks import find_block_position, reindex_steps

# duration kind -> (payload field, inclusive maximum)
DURATION_LIMITS: dict[str, tuple[str, float]] = {
    "calories": ("calories", 10_000),
    "repeat_until_calories": ("calories", 10_000),
    "power_less_than": ("watts", 2_000),
    "power_greater_than": ("watts", 2_000),
    "repeat_until_power_less_than": ("watts", 2_000),
    "repeat_until_power_greater_than": ("watts", 2_000),
    "heart_rate_less_than": ("bpm", 220),
    "repeat_until_heart_rate_greater_than": ("bpm", 220),
    "repeat_until_heart_rate_less_than": ("bpm", 220),
    "repeat_until_time": ("seconds", 86_400),
    "repeat_until_distance": ("meters", 1_000_000),
}

# (target kind, unit) -> inclusive maximum
TARGET_LIMITS: dict[tuple[str, str], float] = {
    ("power", "watts"): 2_000,
    ("power", "percent_ftp"): 200,
    ("heart_rate", "bpm"): 250,
    ("heart_rate", "percent_max"): 100,
    ("pace", "mps"): 20,
    ("cadence", "rpm"): 300,
}

# target kind -> highest zone number
ZONE_LIMITS: dict[str, int] = {"power": 7, "heart_rate": 5, "pace": 5}


def check_duration(duration: Duration) -> list[FieldViolation]:
    """Return the bound violations of a duration (empty when valid)."""
    limit = DURATION_LIMITS.get(duration.type)
    if limit is None:
        return []
    field_name, maximum = limit
    value = getattr(duration, field_name, None)
    if value is None:
        return []
    violations = []
    if value <= 0:
        violations.append(FieldViolation(field=f"duration.{field_name}", message="Must be greater than 0"))
    elif value > maximum:
        violations.append(FieldViolation(field=f"duration.{field_name}", message=f"Maximum {maximum:g}"))
    return violations


def check_target(target: Target) -> list[FieldViolation]:
    """Return the bound violations of a target (empty when valid)."""
    value = getattr(target, "value", None)
    if value is None:
        return []

    if isinstance(value, ZoneValue):
        highest = ZONE_LIMITS.get(target.type)
        if highest is not None and value.value > highest:
            return [FieldViolation(field="target.value", message=f"Zone must be between 1 and {highest}")]
        return []

    if isinstance(value, RangeValue):
        violations = []
        if value.min <= 0 or value.max <= 0:
            violations.append(FieldViolation(field="target.value", message="Values must be greater than 0"))
        if value.min >= value.max:
            violations.append(FieldViolation(field="target.value.min", message="Minimum must be less than maximum"))
        return violations

    if isinstance(value, AbsoluteValue):
        if value.value <= 0:
            return [FieldViolation(field="target.value", message="Must be greater than 0")]
        maximum = TARGET_LIMITS.get((target.type, value.unit))
        if maximum is not None and value.value > maximum:
            return [FieldViolation(field="target.value", message=f"Cannot exceed {maximum:g} {value.unit}")]
    return []


def _raise_if_invalid(violations: list[FieldViolation]) -> None:
    if violations:
        details = "; ".join(f"{violation.field}: {violation.message}" for violation in violations)
        raise KrdValidationError(f"Invalid step value ({details})")


def _coerce_duration(duration: Duration | dict[str, Any]) -> Duration:
    if isinstance(duration, dict):
        try:
            return parse_duration(duration)
        except ValidationError as e:
            raise KrdValidationError(f"Invalid duration: {e}") from e
    return duration


def _coerce_target(target: Target | dict[str, Any]) -> Target:
    if isinstance(target, dict):
        try:
            return parse_target(target)
        except ValidationError as e:
            raise KrdValidationError(f"Invalid target: {e}") from e
    return target


def with_duration(step: WorkoutStep, duration: Duration | dict[str, Any]) -> WorkoutStep:
    """Return ``step`` with a new duration, keeping ``duration_type`` in sync.

    Raises:
        KrdValidationError: If the duration is malformed or out of bounds
    """
    duration = _coerce_duration(duration)
    _raise_if_invalid(check_duration(duration))
    return step.model_copy(update={"duration": duration, "duration_type": DurationType(duration.type)})


def with_target(step: WorkoutStep, target: Target | dict[str, Any]) -> WorkoutStep:
    """Return ``step`` with a new target, keeping ``target_type`` in sync.

    Raises:
        KrdValidationError: If the target is malformed or out of bounds
    """
    target = _coerce_target(target)
    _raise_if_invalid(check_target(target))
    return step.model_copy(update={"target": target, "target_type": TargetType(target.type)})


def _replace_step(workout: Workout, step_index: int, block_id: str | None, change: Any) -> Workout:
    entries = list(workout.steps)
    if block_id is None:
        for position, entry in enumerate(entries):
            if isinstance(entry, WorkoutStep) and entry.step_index == step_index:
                entries[position] = change(entry)
                return workout.model_copy(update={"steps": reindex_steps(entries)})
        raise StepNotFoundError(step_index)

    position = find_block_position(workout, block_id)
    if position is None:
        raise BlockNotFoundError(block_id)
    block = entries[position]
    steps = list(block.steps)
    for offset, step in enumerate(steps):
        if step.step_index == step_index:
            steps[offset] = change(step)
            entries[position] = block.model_copy(update={"steps": steps})
            return workout.model_copy(update={"steps": reindex_steps(entries)})
    raise StepNotFoundError(step_index, block_id)


def update_step_duration(
    workout: Workout,
    step_index: int,
    duration: Duration | dict[str, Any],
    block_id: str | None = None,
) -> Workout:
    """Replace a step's duration; ``block_id`` addresses a step inside a block."""
    return _replace_step(workout, step_index, block_id, lambda step: with_duration(step, duration))


def update_step_target(
    workout: Workout,
    step_index: int,
    target: Target | dict[str, Any],
    block_id: str | None = None,
) -> Workout:
    """Replace a step's target; ``block_id`` addresses a step inside a block."""
    return _replace_step(workout, step_index, block_id, lambda step: with_target(step, target))
