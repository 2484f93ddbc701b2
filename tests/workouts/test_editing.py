"""Tests for the step editing boundary."""

from collections.abc import Callable

import pytest

from kaiord.errors import BlockNotFoundError, KrdValidationError, StepNotFoundError
from kaiord.krd.duration import CaloriesDuration, DistanceDuration, parse_duration
from kaiord.krd.target import AbsoluteValue, PowerTarget, RangeValue, ZoneValue, parse_target
from kaiord.krd.workout import Workout
from kaiord.workouts.blocks import find_block
from kaiord.workouts.editing import (
    check_duration,
    check_target,
    update_step_duration,
    update_step_target,
    with_duration,
    with_target,
)


class TestBounds:
    """Domain limits checked at the editing boundary."""

    @pytest.mark.parametrize(
        ("data", "message"),
        [
            ({"type": "calories", "calories": 0}, "Must be greater than 0"),
            ({"type": "calories", "calories": 10_001}, "Maximum 10000"),
            ({"type": "heart_rate_less_than", "bpm": 221}, "Maximum 220"),
            ({"type": "power_greater_than", "watts": 2_500}, "Maximum 2000"),
            ({"type": "repeat_until_time", "seconds": 90_000, "repeatFrom": 0}, "Maximum 86400"),
        ],
    )
    def test_duration_violations(self, data: dict, message: str) -> None:
        """Test duration bounds."""
        (violation,) = check_duration(parse_duration(data))

        assert violation.message == message

    def test_duration_within_bounds(self) -> None:
        """Test that in-range values and plain time are accepted."""
        assert check_duration(CaloriesDuration(calories=500)) == []
        assert check_duration(DistanceDuration(meters=50_000_000)) == []

    @pytest.mark.parametrize(
        "data",
        [
            {"type": "power", "value": {"unit": "zone", "value": 8}},
            {"type": "heart_rate", "value": {"unit": "zone", "value": 6}},
            {"type": "power", "value": {"unit": "watts", "value": 2_001}},
            {"type": "power", "value": {"unit": "percent_ftp", "value": 201}},
            {"type": "heart_rate", "value": {"unit": "bpm", "value": 251}},
            {"type": "heart_rate", "value": {"unit": "percent_max", "value": 101}},
            {"type": "pace", "value": {"unit": "mps", "value": 21}},
            {"type": "cadence", "value": {"unit": "rpm", "value": 301}},
            {"type": "cadence", "value": {"unit": "rpm", "value": 0}},
            {"type": "power", "value": {"unit": "range", "min": 200, "max": 200}},
            {"type": "power", "value": {"unit": "range", "min": 0, "max": 200}},
        ],
    )
    def test_target_violations(self, data: dict) -> None:
        """Test target bounds."""
        assert check_target(parse_target(data))

    def test_target_within_bounds(self) -> None:
        """Test accepted targets."""
        assert check_target(parse_target({"type": "open"})) == []
        assert check_target(PowerTarget(value=ZoneValue(value=7))) == []
        assert check_target(PowerTarget(value=RangeValue(min=200, max=250))) == []
        assert check_target(PowerTarget(value=AbsoluteValue(unit="watts", value=2_000))) == []


class TestStepUpdates:
    """Type-synchronized replacements."""

    def test_with_duration_syncs_type(self, make_step: Callable) -> None:
        """Test that durationType follows the new duration."""
        step = with_duration(make_step(0), {"type": "distance", "meters": 400})

        assert step.duration == DistanceDuration(meters=400)
        assert step.duration_type == "distance"
        assert step.to_krd()["durationType"] == "distance"

    def test_with_target_syncs_type(self, make_step: Callable) -> None:
        """Test that targetType follows the new target."""
        step = with_target(make_step(0), {"type": "power", "value": {"unit": "watts", "value": 250}})

        assert step.target_type == "power"
        assert step.to_krd()["target"] == {"type": "power", "value": {"unit": "watts", "value": 250}}

    def test_malformed_value_raises(self, make_step: Callable) -> None:
        """Test that undecodable values are validation errors."""
        with pytest.raises(KrdValidationError, match="Invalid duration"):
            with_duration(make_step(0), {"type": "warp", "seconds": 1})
        with pytest.raises(KrdValidationError, match="Invalid target"):
            with_target(make_step(0), {"type": "power"})

    def test_out_of_bounds_value_raises(self, make_step: Callable) -> None:
        """Test that bound violations are validation errors."""
        with pytest.raises(KrdValidationError, match="Invalid step value"):
            with_target(make_step(0), {"type": "heart_rate", "value": {"unit": "bpm", "value": 300}})

    def test_update_top_level_step(self, flat_workout: Workout) -> None:
        """Test addressing a top-level step."""
        result = update_step_duration(flat_workout, 2, {"type": "calories", "calories": 250})

        assert result.steps[2].duration_type == "calories"
        assert flat_workout.steps[2].duration_type == "time"

    def test_update_step_in_block(self, blocks_workout: Workout) -> None:
        """Test addressing a step inside a block."""
        result = update_step_target(
            blocks_workout,
            1,
            {"type": "heart_rate", "value": {"unit": "zone", "value": 1}},
            block_id="block-a",
        )

        block = find_block(result, "block-a")
        assert block.steps[1].target_type == "heart_rate"
        assert block.id == "block-a"
        assert result.steps[0].target_type == "open"

    def test_unknown_step_raises(self, flat_workout: Workout) -> None:
        """Test the missing step error."""
        with pytest.raises(StepNotFoundError):
            update_step_duration(flat_workout, 9, {"type": "open"})

    def test_unknown_block_raises(self, blocks_workout: Workout) -> None:
        """Test the missing block error."""
        with pytest.raises(BlockNotFoundError):
            update_step_target(blocks_workout, 0, {"type": "open"}, block_id="nope")

    def test_unknown_step_in_block_raises(self, blocks_workout: Workout) -> None:
        """Test the missing step in block error."""
        with pytest.raises(StepNotFoundError, match="block-a"):
            update_step_target(blocks_workout, 4, {"type": "open"}, block_id="block-a")
