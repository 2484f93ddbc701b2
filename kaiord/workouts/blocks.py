"""Structural operations over a workout's step list.

A workout's ``steps`` mixes single steps and repetition blocks. Every
operation here returns a new :class:`Workout` and leaves its input untouched.
Unchanged entries are shared between the old and new workout.

Shared rules:

- Top-level ``step_index`` values are contiguous from 0, counted over
  top-level steps only. Blocks do not take an index. Steps inside a block
  are numbered from 0 within the block.
- Blocks are addressed by ``id``, never by list position.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from kaiord.errors import BlockNotFoundError, StepNotFoundError
from kaiord.krd.duration import TimeDuration
from kaiord.krd.target import OpenTarget
from kaiord.krd.workout import Intensity, RepetitionBlock, Workout, WorkoutStep
from kaiord.workouts.ids import IdGenerator, default_id_generator

WorkoutEntry = WorkoutStep | RepetitionBlock

MIN_BLOCK_REPEAT_COUNT = 2
DEFAULT_STEP_SECONDS = 300


@dataclass(frozen=True)
class StepRef:
    """Selection handle for a step: ``block_id`` is None for top-level steps."""

    step_index: int
    block_id: str | None = None


def _with_index(step: WorkoutStep, index: int) -> WorkoutStep:
    if step.step_index == index:
        return step
    return step.model_copy(update={"step_index": index})


def reindex_block(block: RepetitionBlock) -> RepetitionBlock:
    steps = [_with_index(step, index) for index, step in enumerate(block.steps)]
    if all(new is old for new, old in zip(steps, block.steps, strict=True)):
        return block
    return block.model_copy(update={"steps": steps})


def reindex_steps(entries: Sequence[WorkoutEntry]) -> list[WorkoutEntry]:
    """Recompute step indices for a step list.

    Args:
        entries: Top-level steps and blocks in order

    Returns:
        New list where top-level steps are numbered 0..n-1 among themselves
        and each block's steps are numbered from 0
    """
    result: list[WorkoutEntry] = []
    next_index = 0
    for entry in entries:
        if isinstance(entry, RepetitionBlock):
            result.append(reindex_block(entry))
        else:
            result.append(_with_index(entry, next_index))
            next_index += 1
    return result


def _replace_steps(workout: Workout, entries: Sequence[WorkoutEntry]) -> Workout:
    return workout.model_copy(update={"steps": reindex_steps(entries)})


def find_block(workout: Workout, block_id: str) -> RepetitionBlock | None:
    """Return the block with ``block_id``, or None."""
    position = find_block_position(workout, block_id)
    return workout.steps[position] if position is not None else None


def find_block_position(workout: Workout, block_id: str) -> int | None:
    for position, entry in enumerate(workout.steps):
        if isinstance(entry, RepetitionBlock) and entry.id == block_id:
            return position
    return None


def _require_block_position(workout: Workout, block_id: str) -> int:
    position = find_block_position(workout, block_id)
    if position is None:
        raise BlockNotFoundError(block_id)
    return position


def _require_step_position(workout: Workout, step_index: int) -> int:
    for position, entry in enumerate(workout.steps):
        if isinstance(entry, WorkoutStep) and entry.step_index == step_index:
            return position
    raise StepNotFoundError(step_index)


def default_step(step_index: int = 0) -> WorkoutStep:
    """Five minutes, open target, active intensity."""
    return WorkoutStep(
        step_index=step_index,
        duration=TimeDuration(seconds=DEFAULT_STEP_SECONDS),
        target=OpenTarget(),
        intensity=Intensity.ACTIVE,
    )


# Block creation and removal


def wrap_steps(
    workout: Workout,
    step_indices: Iterable[int],
    repeat_count: int,
    id_generator: IdGenerator = default_id_generator,
) -> Workout:
    """Move the selected top-level steps into a new repetition block.

    Selected steps keep their original relative order, whatever the order of
    ``step_indices``. The block is inserted where the earliest selected step
    was. Steps already inside blocks cannot be selected.

    Args:
        workout: Workout to transform
        step_indices: Top-level ``step_index`` values to wrap
        repeat_count: Repeat count of the new block
        id_generator: Source of the new block's id

    Returns:
        New workout, or ``workout`` itself when no step matched
    """
    selected = set(step_indices)
    wrapped: list[WorkoutStep] = []
    remaining: list[WorkoutEntry] = []
    insert_at: int | None = None

    for entry in workout.steps:
        if isinstance(entry, WorkoutStep) and entry.step_index in selected:
            if insert_at is None:
                insert_at = len(remaining)
            wrapped.append(entry)
        else:
            remaining.append(entry)

    if insert_at is None:
        return workout

    block = reindex_block(RepetitionBlock(id=id_generator.next(), repeat_count=repeat_count, steps=wrapped))
    remaining.insert(insert_at, block)
    return _replace_steps(workout, remaining)


def create_repetition_block(
    workout: Workout,
    step_indices: Iterable[int],
    repeat_count: int,
    id_generator: IdGenerator = default_id_generator,
) -> Workout:
    """Wrap the selected steps into a block, if the request is actionable.

    An empty selection or a repeat count below 2 leaves the workout unchanged.
    """
    indices = list(step_indices)
    if not indices or repeat_count < MIN_BLOCK_REPEAT_COUNT:
        return workout
    return wrap_steps(workout, indices, repeat_count, id_generator)


def create_empty_repetition_block(
    workout: Workout,
    repeat_count: int = MIN_BLOCK_REPEAT_COUNT,
    id_generator: IdGenerator = default_id_generator,
    position: int | None = None,
) -> Workout:
    """Add a block holding one default step at ``position`` (default: end)."""
    if repeat_count < MIN_BLOCK_REPEAT_COUNT:
        return workout
    block = RepetitionBlock(id=id_generator.next(), repeat_count=repeat_count, steps=[default_step(0)])
    entries = list(workout.steps)
    entries.insert(len(entries) if position is None else position, block)
    return _replace_steps(workout, entries)


def unwrap_block(workout: Workout, block_id: str) -> Workout:
    """Dissolve a block, splicing its steps in at the block's position.

    Raises:
        BlockNotFoundError: If no block has ``block_id``
    """
    position = _require_block_position(workout, block_id)
    block = workout.steps[position]
    entries = [*workout.steps[:position], *block.steps, *workout.steps[position + 1 :]]
    return _replace_steps(workout, entries)


def delete_block(
    workout: Workout,
    block_id: str,
    selection: Iterable[StepRef] = (),
) -> tuple[Workout, frozenset[StepRef]]:
    """Remove a block and all of its steps.

    Args:
        workout: Workout to transform
        block_id: Id of the block to delete
        selection: Currently selected steps

    Returns:
        Tuple of (new workout, selection without references into the block)

    Raises:
        BlockNotFoundError: If no block has ``block_id``
    """
    position = _require_block_position(workout, block_id)
    entries = [*workout.steps[:position], *workout.steps[position + 1 :]]
    remaining_selection = frozenset(ref for ref in selection if ref.block_id != block_id)
    return _replace_steps(workout, entries), remaining_selection


def set_repeat_count(workout: Workout, block_id: str, repeat_count: int) -> Workout:
    """Change a block's repeat count.

    Raises:
        BlockNotFoundError: If no block has ``block_id``
        ValueError: If ``repeat_count`` is below 1
    """
    if repeat_count < 1:
        raise ValueError(f"repeat_count must be at least 1, got {repeat_count}")
    position = _require_block_position(workout, block_id)
    entries = list(workout.steps)
    entries[position] = entries[position].model_copy(update={"repeat_count": repeat_count})
    return _replace_steps(workout, entries)


# Top-level steps


def insert_step(workout: Workout, step: WorkoutStep | None = None, position: int | None = None) -> Workout:
    """Insert a step at list ``position`` (default: end) and re-index."""
    entries = list(workout.steps)
    entries.insert(len(entries) if position is None else position, step or default_step())
    return _replace_steps(workout, entries)


def delete_step(workout: Workout, step_index: int) -> Workout:
    """Remove the top-level step with ``step_index`` and re-index.

    Raises:
        StepNotFoundError: If no top-level step has ``step_index``
    """
    position = _require_step_position(workout, step_index)
    return _replace_steps(workout, [*workout.steps[:position], *workout.steps[position + 1 :]])


def duplicate_step(workout: Workout, step_index: int) -> Workout:
    """Insert a copy of a top-level step right after it.

    Raises:
        StepNotFoundError: If no top-level step has ``step_index``
    """
    position = _require_step_position(workout, step_index)
    original = workout.steps[position]
    entries = list(workout.steps)
    entries.insert(position + 1, original.model_copy(deep=True))
    return _replace_steps(workout, entries)


def reorder_entries(workout: Workout, from_position: int, to_position: int) -> Workout:
    """Move the entry at list position ``from_position`` to ``to_position``.

    Blocks move as a unit and keep their id and contents.

    Raises:
        IndexError: If either position is out of range
    """
    count = len(workout.steps)
    for value in (from_position, to_position):
        if not 0 <= value < count:
            raise IndexError(f"Entry position {value} out of range for {count} entries")
    if from_position == to_position:
        return workout
    entries = list(workout.steps)
    entry = entries.pop(from_position)
    entries.insert(to_position, entry)
    return _replace_steps(workout, entries)


# Steps inside a block


def _update_block(workout: Workout, block_id: str, steps: list[WorkoutStep]) -> Workout:
    position = _require_block_position(workout, block_id)
    entries = list(workout.steps)
    entries[position] = entries[position].model_copy(update={"steps": steps})
    return _replace_steps(workout, entries)


def _block_steps(workout: Workout, block_id: str) -> list[WorkoutStep]:
    position = _require_block_position(workout, block_id)
    return list(workout.steps[position].steps)


def add_step_to_block(workout: Workout, block_id: str, step: WorkoutStep | None = None) -> Workout:
    """Append a step (default: five minute open step) to a block."""
    steps = _block_steps(workout, block_id)
    steps.append(step or default_step(len(steps)))
    return _update_block(workout, block_id, steps)


def remove_step_from_block(workout: Workout, block_id: str, step_index: int) -> Workout:
    """Remove a step from a block. A block left empty is removed as well.

    Raises:
        BlockNotFoundError: If no block has ``block_id``
        StepNotFoundError: If the block has no step with ``step_index``
    """
    steps = _block_steps(workout, block_id)
    kept = [step for step in steps if step.step_index != step_index]
    if len(kept) == len(steps):
        raise StepNotFoundError(step_index, block_id)
    if not kept:
        updated, _ = delete_block(workout, block_id)
        return updated
    return _update_block(workout, block_id, kept)


def reorder_steps_in_block(workout: Workout, block_id: str, from_index: int, to_index: int) -> Workout:
    """Move a step within a block; the block's steps are re-indexed from 0.

    Raises:
        BlockNotFoundError: If no block has ``block_id``
        IndexError: If either index is out of range
    """
    steps = _block_steps(workout, block_id)
    for value in (from_index, to_index):
        if not 0 <= value < len(steps):
            raise IndexError(f"Step position {value} out of range for block {block_id}")
    if from_index == to_index:
        return workout
    steps.insert(to_index, steps.pop(from_index))
    return _update_block(workout, block_id, steps)
