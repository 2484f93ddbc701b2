"""Workout statistics: totals across steps and repetition blocks."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from kaiord.krd.duration import (
    DistanceDuration,
    Duration,
    RepeatUntilDistanceDuration,
    RepeatUntilTimeDuration,
    TimeDuration,
)
from kaiord.krd.workout import RepetitionBlock, Workout, WorkoutStep

# Kinds whose length depends on the athlete rather than the plan
OPEN_ENDED_DURATION_TYPES = frozenset(
    {
        "open",
        "heart_rate_less_than",
        "repeat_until_heart_rate_greater_than",
        "repeat_until_heart_rate_less_than",
        "power_less_than",
        "power_greater_than",
        "repeat_until_power_less_than",
        "repeat_until_power_greater_than",
    }
)


@dataclass(frozen=True)
class WorkoutStats:
    """Totals for a workout.

    ``total_duration_seconds`` and ``total_distance_meters`` are None when any
    step's length cannot be expressed in that unit.
    """

    total_duration_seconds: float | None
    total_distance_meters: float | None
    has_open_steps: bool
    step_count: int
    repetition_count: int


@dataclass
class _Totals:
    duration: float | None = 0
    distance: float | None = 0
    has_open_steps: bool = False

    def add(self, other: _Totals, times: int = 1) -> None:
        self.duration = None if self.duration is None or other.duration is None else self.duration + other.duration * times
        self.distance = None if self.distance is None or other.distance is None else self.distance + other.distance * times
        self.has_open_steps = self.has_open_steps or other.has_open_steps


def _step_seconds(duration: Duration) -> float | None:
    if isinstance(duration, TimeDuration | RepeatUntilTimeDuration):
        return duration.seconds
    return None


def _step_meters(duration: Duration) -> float | None:
    if isinstance(duration, DistanceDuration | RepeatUntilDistanceDuration):
        return duration.meters
    return None


def _step_totals(step: WorkoutStep) -> _Totals:
    return _Totals(
        duration=_step_seconds(step.duration),
        distance=_step_meters(step.duration),
        has_open_steps=step.duration.type in OPEN_ENDED_DURATION_TYPES,
    )


def _steps_totals(steps: Sequence[WorkoutStep]) -> _Totals:
    totals = _Totals()
    for step in steps:
        totals.add(_step_totals(step))
    return totals


def calculate_workout_stats(workout: Workout | None) -> WorkoutStats:
    """Calculate totals for a workout, counting every repetition."""
    if workout is None or not workout.steps:
        return WorkoutStats(
            total_duration_seconds=None,
            total_distance_meters=None,
            has_open_steps=False,
            step_count=0,
            repetition_count=0,
        )

    totals = _Totals()
    step_count = 0
    repetition_count = 0
    for entry in workout.steps:
        if isinstance(entry, RepetitionBlock):
            repetition_count += 1
            step_count += len(entry.steps) * entry.repeat_count
            totals.add(_steps_totals(entry.steps), times=entry.repeat_count)
        else:
            step_count += 1
            totals.add(_step_totals(entry))

    return WorkoutStats(
        total_duration_seconds=totals.duration,
        total_distance_meters=totals.distance,
        has_open_steps=totals.has_open_steps,
        step_count=step_count,
        repetition_count=repetition_count,
    )
