"""Tests for workout statistics."""

from collections.abc import Callable

from kaiord.krd.duration import CaloriesDuration, DistanceDuration, RepeatUntilTimeDuration
from kaiord.krd.workout import RepetitionBlock, Workout
from kaiord.workouts.stats import calculate_workout_stats


def test_flat_time_workout(flat_workout: Workout) -> None:
    """Test totals for time-only steps."""
    stats = calculate_workout_stats(flat_workout)

    assert stats.total_duration_seconds == 1000
    assert stats.total_distance_meters is None
    assert stats.has_open_steps is False
    assert stats.step_count == 4
    assert stats.repetition_count == 0


def test_repetitions_multiply_totals(make_step: Callable) -> None:
    """Test that block steps count once per repetition."""
    workout = Workout(
        sport="running",
        steps=[
            make_step(0, seconds=600),
            RepetitionBlock(id="b", repeat_count=4, steps=[make_step(0, seconds=60), make_step(1, seconds=90)]),
        ],
    )

    stats = calculate_workout_stats(workout)

    assert stats.total_duration_seconds == 600 + 4 * 150
    assert stats.step_count == 9
    assert stats.repetition_count == 1


def test_open_steps_void_duration(blocks_workout: Workout) -> None:
    """Test that an open step makes the duration total unknown."""
    stats = calculate_workout_stats(blocks_workout)

    assert stats.total_duration_seconds is None
    assert stats.has_open_steps is True
    assert stats.step_count == 12
    assert stats.repetition_count == 2


def test_distance_totals(make_step: Callable) -> None:
    """Test that distance kinds sum into the distance total."""
    workout = Workout(
        sport="running",
        steps=[
            make_step(0, duration=DistanceDuration(meters=1000)),
            RepetitionBlock(repeat_count=3, steps=[make_step(0, duration=DistanceDuration(meters=400))]),
        ],
    )

    stats = calculate_workout_stats(workout)

    assert stats.total_distance_meters == 2200
    assert stats.total_duration_seconds is None


def test_repeat_until_time_counts_as_time(make_step: Callable) -> None:
    """Test that repeat_until_time contributes its seconds."""
    workout = Workout(
        sport="cycling",
        steps=[make_step(0, seconds=300), make_step(1, duration=RepeatUntilTimeDuration(seconds=1200, repeat_from=0))],
    )

    assert calculate_workout_stats(workout).total_duration_seconds == 1500


def test_calories_step_is_not_open(make_step: Callable) -> None:
    """Test that a calories step is bounded but has no time or distance."""
    workout = Workout(sport="running", steps=[make_step(0, duration=CaloriesDuration(calories=300))])

    stats = calculate_workout_stats(workout)

    assert stats.has_open_steps is False
    assert stats.total_duration_seconds is None


def test_missing_or_empty_workout() -> None:
    """Test the zero stats."""
    for workout in (None, Workout(sport="running")):
        stats = calculate_workout_stats(workout)
        assert stats.step_count == 0
        assert stats.total_duration_seconds is None
        assert stats.has_open_steps is False
