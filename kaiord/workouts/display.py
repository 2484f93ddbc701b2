"""Flattened view of a workout for charts and timelines."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from kaiord.krd.workout import RepetitionBlock, Workout, WorkoutStep


@dataclass(frozen=True)
class DisplayBar:
    """One rendered occurrence of a step.

    Attributes:
        position: Ordinal of the bar in the flattened sequence
        step: The step being rendered
        block_id: Id of the owning block, None for top-level steps
        repetition: 1-based repetition number inside the block, None for top-level steps
        repeat_count: Repeat count of the owning block, None for top-level steps
    """

    position: int
    step: WorkoutStep
    block_id: str | None = None
    repetition: int | None = None
    repeat_count: int | None = None

    @property
    def in_block(self) -> bool:
        return self.repetition is not None


def flatten_for_display(workout: Workout) -> Iterator[DisplayBar]:
    """Yield one bar per step occurrence.

    A block with repeat count N contributes N copies of its steps, every copy
    tagged with the block's id. The workout is only read, so the generator can
    be restarted by calling this again.
    """
    position = 0
    for entry in workout.steps:
        if isinstance(entry, RepetitionBlock):
            for repetition in range(1, entry.repeat_count + 1):
                for step in entry.steps:
                    yield DisplayBar(
                        position=position,
                        step=step,
                        block_id=entry.id,
                        repetition=repetition,
                        repeat_count=entry.repeat_count,
                    )
                    position += 1
        else:
            yield DisplayBar(position=position, step=entry)
            position += 1
