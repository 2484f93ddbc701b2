"""Duration codec: KRD duration <-> TCX ``Duration`` element.

TCX natively expresses ``Time_t`` and ``Distance_t``. Every other kind is
written as ``LapButton_t`` and, when it carries a payload, annotated with
``kaiord:originalDurationType`` plus ``kaiord:originalDuration<Field>`` so
that the kind survives a round trip.
"""

from __future__ import annotations

from typing import Any

from loguru import logger
from pydantic import ValidationError

from kaiord.krd.duration import (
    DistanceDuration,
    Duration,
    OpenDuration,
    TimeDuration,
    parse_duration,
)
from kaiord.tcx.constants import ORIGINAL_DURATION_PREFIX, ORIGINAL_DURATION_TYPE, XSI_TYPE
from kaiord.tcx.xml_tree import as_number, local_name

# kind -> (attribute suffix, model field)
EXTENDED_DURATION_PAYLOADS: dict[str, tuple[str, str]] = {
    "heart_rate_less_than": ("Bpm", "bpm"),
    "calories": ("Calories", "calories"),
    "power_less_than": ("Watts", "watts"),
    "power_greater_than": ("Watts", "watts"),
    "repeat_until_time": ("Seconds", "seconds"),
    "repeat_until_distance": ("Meters", "meters"),
    "repeat_until_calories": ("Calories", "calories"),
    "repeat_until_heart_rate_greater_than": ("Bpm", "bpm"),
    "repeat_until_heart_rate_less_than": ("Bpm", "bpm"),
    "repeat_until_power_less_than": ("Watts", "watts"),
    "repeat_until_power_greater_than": ("Watts", "watts"),
}

REPEAT_FROM_ATTRIBUTE = f"{ORIGINAL_DURATION_PREFIX}RepeatFrom"


def tcx_type(element: Any) -> str | None:
    """Return the ``xsi:type`` of a tree node without any namespace prefix."""
    if not isinstance(element, dict):
        return None
    value = element.get(XSI_TYPE)
    return local_name(str(value)) if value is not None else None


def decode_duration(element: Any) -> Duration:
    """Convert a TCX ``Duration`` node into a KRD duration.

    Args:
        element: The ``Duration`` node from the generic tree (may be missing)

    Returns:
        ``time`` or ``distance`` for the native sub-types, the restored
        extended kind when kaiord attributes are present, otherwise ``open``
    """
    duration_type = tcx_type(element)

    if duration_type == "Time_t":
        seconds = as_number(element.get("Seconds"))
        if seconds is not None:
            return TimeDuration(seconds=seconds)
        logger.warning("Time_t duration without numeric Seconds, treating as open")
        return OpenDuration()

    if duration_type == "Distance_t":
        meters = as_number(element.get("Meters"))
        if meters is not None:
            return DistanceDuration(meters=meters)
        logger.warning("Distance_t duration without numeric Meters, treating as open")
        return OpenDuration()

    restored = _restore_extended_duration(element) if isinstance(element, dict) else None
    return restored if restored is not None else OpenDuration()


def encode_duration(duration: Duration) -> dict[str, Any]:
    """Convert a KRD duration into a TCX ``Duration`` node."""
    if isinstance(duration, TimeDuration):
        return {XSI_TYPE: "Time_t", "Seconds": duration.seconds}
    if isinstance(duration, DistanceDuration):
        return {XSI_TYPE: "Distance_t", "Meters": duration.meters}

    element: dict[str, Any] = {XSI_TYPE: "LapButton_t"}
    payload = EXTENDED_DURATION_PAYLOADS.get(duration.type)
    if payload is None:
        return element

    suffix, field_name = payload
    value = getattr(duration, field_name, None)
    if value is None:
        return element

    element[ORIGINAL_DURATION_TYPE] = duration.type
    element[f"{ORIGINAL_DURATION_PREFIX}{suffix}"] = value
    repeat_from = getattr(duration, "repeat_from", None)
    if repeat_from is not None:
        element[REPEAT_FROM_ATTRIBUTE] = repeat_from
    return element


def _restore_extended_duration(element: dict[str, Any]) -> Duration | None:
    kind = element.get(ORIGINAL_DURATION_TYPE)
    if kind is None:
        return None
    payload = EXTENDED_DURATION_PAYLOADS.get(str(kind))
    if payload is None:
        logger.warning(f"Unknown kaiord duration type '{kind}', treating as open")
        return None

    suffix, field_name = payload
    value = as_number(element.get(f"{ORIGINAL_DURATION_PREFIX}{suffix}"))
    if value is None:
        return None

    data: dict[str, Any] = {"type": kind, field_name: value}
    if str(kind).startswith("repeat_until_"):
        repeat_from = as_number(element.get(REPEAT_FROM_ATTRIBUTE))
        if repeat_from is None:
            return None
        data["repeat_from"] = repeat_from

    try:
        return parse_duration(data)
    except ValidationError as e:
        logger.warning(f"Invalid kaiord duration attributes for '{kind}': {e}")
        return None
