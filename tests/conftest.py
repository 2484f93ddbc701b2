"""Root conftest for all tests.

Shared TCX documents, KRD builders and a recording logger.
"""

from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest

from kaiord.krd.document import KRD, KrdExtensions, KrdMetadata
from kaiord.krd.duration import OpenDuration, TimeDuration
from kaiord.krd.target import OpenTarget
from kaiord.krd.workout import Intensity, RepetitionBlock, Workout, WorkoutStep
from kaiord.workouts.ids import SequentialIdGenerator

SIMPLE_TCX = """<?xml version="1.0" encoding="UTF-8"?>
<TrainingCenterDatabase xmlns="http://www.garmin.com/xmlschemas/TrainingCenterDatabase/v2"
    xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">
  <Workouts>
    <Workout Sport="Running">
      <Name>Easy Run</Name>
      <Step xsi:type="Step_t">
        <StepId>1</StepId>
        <Duration xsi:type="Time_t">
          <Seconds>300</Seconds>
        </Duration>
        <Intensity>Active</Intensity>
        <Target xsi:type="None_t"/>
      </Step>
    </Workout>
  </Workouts>
</TrainingCenterDatabase>
"""

INTERVALS_TCX = """<?xml version="1.0" encoding="UTF-8"?>
<TrainingCenterDatabase xmlns="http://www.garmin.com/xmlschemas/TrainingCenterDatabase/v2"
    xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
    xmlns:kaiord="http://kaiord.dev/tcx-extensions/1.0"
    kaiord:timeCreated="2024-01-15T10:30:00Z"
    kaiord:manufacturer="garmin"
    kaiord:product="fenix7"
    kaiord:serialNumber="1234567890">
  <Workouts>
    <Workout Sport="Biking">
      <Name>Sweet Spot</Name>
      <Step xsi:type="Step_t">
        <StepId>1</StepId>
        <Name>Warm up</Name>
        <Duration xsi:type="Time_t"><Seconds>600</Seconds></Duration>
        <Intensity>Warmup</Intensity>
        <Target xsi:type="HeartRate_t">
          <HeartRateZone xsi:type="PredefinedHeartRateZone_t"><Number>2</Number></HeartRateZone>
        </Target>
      </Step>
      <Step xsi:type="Step_t">
        <StepId>2</StepId>
        <Duration xsi:type="Distance_t"><Meters>5000</Meters></Duration>
        <Intensity>Active</Intensity>
        <Target xsi:type="None_t"/>
        <Extensions>
          <TPX xmlns="http://www.garmin.com/xmlschemas/ActivityExtension/v2">
            <Watts>250</Watts>
          </TPX>
        </Extensions>
      </Step>
      <Step xsi:type="Step_t">
        <StepId>3</StepId>
        <Duration xsi:type="LapButton_t" kaiord:originalDurationType="calories" kaiord:originalDurationCalories="500"/>
        <Intensity>Resting</Intensity>
        <Target xsi:type="None_t"/>
      </Step>
    </Workout>
  </Workouts>
</TrainingCenterDatabase>
"""


@pytest.fixture
def simple_tcx() -> str:
    """One running workout with a single five minute open step."""
    return SIMPLE_TCX


@pytest.fixture
def intervals_tcx() -> str:
    """Cycling workout with metadata, HR zone, TPX power and a calories step."""
    return INTERVALS_TCX


@pytest.fixture
def mock_logger() -> MagicMock:
    """Logger double recording pipeline calls."""
    return MagicMock(spec=["debug", "info", "warning", "error"])


@pytest.fixture
def id_generator() -> SequentialIdGenerator:
    """Deterministic block ids: block-1, block-2, ..."""
    return SequentialIdGenerator()


@pytest.fixture
def make_step() -> Callable[..., WorkoutStep]:
    """Factory for time-based open steps."""

    def _make_step(step_index: int = 0, seconds: int = 300, **overrides: Any) -> WorkoutStep:
        data: dict[str, Any] = {
            "step_index": step_index,
            "duration": TimeDuration(seconds=seconds),
            "target": OpenTarget(),
            "intensity": Intensity.ACTIVE,
        }
        data.update(overrides)
        return WorkoutStep(**data)

    return _make_step


@pytest.fixture
def flat_workout(make_step: Callable[..., WorkoutStep]) -> Workout:
    """Four top-level steps with distinct durations (100, 200, 300, 400 s)."""
    return Workout(
        name="Flat",
        sport="running",
        steps=[make_step(index, seconds=(index + 1) * 100) for index in range(4)],
    )


@pytest.fixture
def blocks_workout(make_step: Callable[..., WorkoutStep]) -> Workout:
    """Warmup, a 3x block (work + rest), an id-less 2x block and a cooldown."""
    return Workout(
        name="Blocks",
        sport="running",
        steps=[
            make_step(0, seconds=600, intensity=Intensity.WARMUP),
            RepetitionBlock(
                id="block-a",
                repeat_count=3,
                steps=[make_step(0, seconds=60), make_step(1, seconds=120, intensity=Intensity.REST)],
            ),
            RepetitionBlock(
                repeat_count=2,
                steps=[make_step(0, seconds=30), make_step(1, duration=OpenDuration())],
            ),
            make_step(1, seconds=300, intensity=Intensity.COOLDOWN),
        ],
    )


@pytest.fixture
def make_krd() -> Callable[..., KRD]:
    """Wrap a workout into a KRD document."""

    def _make_krd(workout: Workout, **metadata: Any) -> KRD:
        return KRD(
            metadata=KrdMetadata(sport=workout.sport, **metadata),
            extensions=KrdExtensions(workout=workout),
        )

    return _make_krd
