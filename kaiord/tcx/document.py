"""Document codec: KRD document <-> TCX ``TrainingCenterDatabase`` tree."""

from __future__ import annotations

from typing import Any

from loguru import logger

from kaiord.errors import TcxParsingError
from kaiord.krd.document import KRD, KrdExtensions, KrdMetadata
from kaiord.tcx.constants import KAIORD_NS, METADATA_ATTRIBUTES, ROOT_ELEMENT, TCX_NS, XSI_NS
from kaiord.tcx.workout import decode_workout, encode_workout

MISSING_ROOT_MESSAGE = "Invalid TCX format: missing TrainingCenterDatabase element"
NO_WORKOUTS_MESSAGE = "No workouts found in TCX file"
MISSING_WORKOUT_MESSAGE = "KRD does not contain workout data in extensions"


def decode_document(tree: dict[str, Any], custom_zones: bool = False) -> KRD:
    """Convert a parsed TCX tree into a KRD document.

    Only the first ``Workout`` is decoded when the file holds several.

    Args:
        tree: Generic tree returned by :func:`kaiord.tcx.xml_tree.parse_xml`
        custom_zones: Forwarded to the target codec

    Returns:
        KRD document with the workout in ``extensions.workout``

    Raises:
        TcxParsingError: If the root element or the workout is missing
    """
    if ROOT_ELEMENT not in tree:
        raise TcxParsingError(MISSING_ROOT_MESSAGE)
    database = tree[ROOT_ELEMENT]
    if not isinstance(database, dict):
        raise TcxParsingError(NO_WORKOUTS_MESSAGE)

    logger.debug("Converting TCX to KRD")

    workout_element = _first_workout(database)
    workout = decode_workout(workout_element, custom_zones=custom_zones)

    metadata: dict[str, Any] = {"sport": workout.sport}
    for attribute, field_name in METADATA_ATTRIBUTES.items():
        value = database.get(attribute)
        if value is not None and value != "":
            metadata[field_name] = str(value)

    extensions = database.get("Extensions")
    krd = KRD(
        metadata=KrdMetadata(**metadata),
        extensions=KrdExtensions(
            workout=workout,
            tcx=dict(extensions) if isinstance(extensions, dict) else None,
        ),
    )

    logger.debug("TCX to KRD conversion complete")
    return krd


def encode_document(krd: KRD, custom_zones: bool = False) -> dict[str, Any]:
    """Convert a KRD document into a TCX tree ready for serialization.

    Raises:
        TcxParsingError: If the document carries no workout
    """
    workout = krd.extensions.workout
    if workout is None:
        raise TcxParsingError(MISSING_WORKOUT_MESSAGE)

    logger.debug("Converting KRD to TCX")

    database: dict[str, Any] = {
        "@_xmlns": TCX_NS,
        "@_xmlns:xsi": XSI_NS,
        "@_xmlns:kaiord": KAIORD_NS,
    }
    for attribute, field_name in METADATA_ATTRIBUTES.items():
        value = getattr(krd.metadata, field_name)
        if value:
            database[attribute] = value

    database["Workouts"] = {"Workout": encode_workout(workout, custom_zones=custom_zones)}
    if krd.extensions.tcx is not None:
        database["Extensions"] = krd.extensions.tcx

    logger.debug("KRD to TCX conversion complete")
    return {ROOT_ELEMENT: database}


def _first_workout(database: dict[str, Any]) -> dict[str, Any]:
    workouts = database.get("Workouts")
    if isinstance(workouts, list):
        workouts = workouts[0] if workouts else None
    workout = workouts.get("Workout") if isinstance(workouts, dict) else None
    if isinstance(workout, list):
        if len(workout) > 1:
            logger.warning(f"TCX file contains {len(workout)} workouts, converting only the first")
        workout = workout[0] if workout else None
    if not isinstance(workout, dict):
        raise TcxParsingError(NO_WORKOUTS_MESSAGE)
    return workout
