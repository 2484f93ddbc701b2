"""Migration-on-read for legacy documents."""

from __future__ import annotations

from loguru import logger

from kaiord.krd.document import KRD
from kaiord.krd.workout import RepetitionBlock, Workout
from kaiord.workouts.ids import IdGenerator, default_id_generator


def migrate_repetition_blocks(workout: Workout, id_generator: IdGenerator = default_id_generator) -> Workout:
    """Give every repetition block without an id a fresh one.

    Blocks that already have an id are kept as is. The input workout is not
    modified; when nothing needs an id the same object is returned.
    """
    missing = sum(1 for entry in workout.steps if isinstance(entry, RepetitionBlock) and not entry.id)
    if not missing:
        return workout

    logger.debug(f"Assigning ids to {missing} legacy repetition block(s)")
    entries = [
        entry.model_copy(update={"id": id_generator.next()})
        if isinstance(entry, RepetitionBlock) and not entry.id
        else entry
        for entry in workout.steps
    ]
    return workout.model_copy(update={"steps": entries})


def migrate_krd(krd: KRD, id_generator: IdGenerator = default_id_generator) -> KRD:
    """Apply :func:`migrate_repetition_blocks` to a loaded document."""
    workout = krd.extensions.workout
    if workout is None:
        return krd
    migrated = migrate_repetition_blocks(workout, id_generator)
    return krd if migrated is workout else krd.with_workout(migrated)
