"""Target codec: KRD target <-> TCX ``Target`` element.

By default only ``open`` and heart rate zones map to TCX. Power is carried in
step extensions (see :mod:`kaiord.tcx.step`). Pace, cadence and non-zone heart
rate targets encode to ``None_t``.

With ``custom_zones`` enabled the codec also maps custom heart rate zones,
speed zones and cadence zones in both directions. Running cadence is stored
in TCX as steps per minute, twice the KRD revolutions per minute.
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from kaiord.krd.target import (
    AbsoluteValue,
    CadenceTarget,
    HeartRateTarget,
    OpenTarget,
    PaceTarget,
    RangeValue,
    Target,
    ZoneValue,
)
from kaiord.tcx.constants import XSI_TYPE
from kaiord.tcx.duration import tcx_type
from kaiord.tcx.xml_tree import as_number

NONE_TARGET: dict[str, Any] = {XSI_TYPE: "None_t"}

_HR_VALUE_TYPES: dict[str, str] = {
    "HeartRateInBeatsPerMinute_t": "bpm",
    "HeartRateAsPercentOfMax_t": "percent_max",
}
_HR_UNIT_TYPES: dict[str, str] = {unit: xsi for xsi, unit in _HR_VALUE_TYPES.items()}


def decode_target(element: Any, sport: str | None = None, custom_zones: bool = False) -> Target:
    """Convert a TCX ``Target`` node into a KRD target.

    Args:
        element: The ``Target`` node from the generic tree (may be missing)
        sport: KRD sport of the enclosing workout, used for cadence scaling
        custom_zones: Also decode custom heart rate, speed and cadence zones

    Returns:
        The decoded target; anything not representable decodes to ``open``
    """
    target_type = tcx_type(element)

    if target_type == "HeartRate_t":
        return _decode_heart_rate(element.get("HeartRateZone"), custom_zones)
    if custom_zones and target_type == "Speed_t":
        return _decode_speed(element.get("SpeedZone"))
    if custom_zones and target_type == "Cadence_t":
        return _decode_cadence(element.get("CadenceZone"), sport)
    return OpenTarget()


def encode_target(target: Target, sport: str | None = None, custom_zones: bool = False) -> dict[str, Any]:
    """Convert a KRD target into a TCX ``Target`` node.

    Power targets never appear in ``Target``; the step codec writes them to
    the step's extensions.
    """
    if isinstance(target, HeartRateTarget):
        value = target.value
        if isinstance(value, ZoneValue):
            return {
                XSI_TYPE: "HeartRate_t",
                "HeartRateZone": {XSI_TYPE: "PredefinedHeartRateZone_t", "Number": value.value},
            }
        if custom_zones:
            return _encode_custom_heart_rate(value)
    elif custom_zones and isinstance(target, PaceTarget):
        return _encode_speed(target.value)
    elif custom_zones and isinstance(target, CadenceTarget):
        return _encode_cadence(target.value, sport)

    if not isinstance(target, OpenTarget):
        logger.debug(f"Target type '{target.type}' has no TCX representation, writing None_t")
    return dict(NONE_TARGET)


def _decode_heart_rate(zone: Any, custom_zones: bool) -> Target:
    zone_type = tcx_type(zone)
    if zone_type == "PredefinedHeartRateZone_t":
        number = as_number(zone.get("Number"))
        if number is not None and number >= 1:
            return HeartRateTarget(value=ZoneValue(value=int(number)))
        return OpenTarget()
    if custom_zones and zone_type == "CustomHeartRateZone_t":
        low_unit, low = _heart_rate_bound(zone.get("Low"))
        high_unit, high = _heart_rate_bound(zone.get("High"))
        if low is None or high is None or low_unit != high_unit or low > high:
            return OpenTarget()
        if low == high:
            return HeartRateTarget(value=AbsoluteValue(unit=low_unit, value=low))
        return HeartRateTarget(value=RangeValue(min=low, max=high))
    return OpenTarget()


def _heart_rate_bound(node: Any) -> tuple[str, int | float | None]:
    # Accepts both <Low>140</Low> and <Low xsi:type="..."><Value>140</Value></Low>
    if isinstance(node, dict) and "Value" in node:
        unit = _HR_VALUE_TYPES.get(tcx_type(node) or "", "bpm")
        return unit, as_number(node.get("Value"))
    return "bpm", as_number(node)


def _encode_custom_heart_rate(value: Any) -> dict[str, Any]:
    if isinstance(value, RangeValue):
        low, high, unit = value.min, value.max, "bpm"
    elif isinstance(value, AbsoluteValue) and value.unit in _HR_UNIT_TYPES:
        low = high = value.value
        unit = value.unit
    else:
        return dict(NONE_TARGET)
    value_type = _HR_UNIT_TYPES[unit]
    return {
        XSI_TYPE: "HeartRate_t",
        "HeartRateZone": {
            XSI_TYPE: "CustomHeartRateZone_t",
            "Low": {XSI_TYPE: value_type, "Value": low},
            "High": {XSI_TYPE: value_type, "Value": high},
        },
    }


def _decode_speed(zone: Any) -> Target:
    zone_type = tcx_type(zone)
    if zone_type == "PredefinedSpeedZone_t":
        number = as_number(zone.get("Number"))
        if number is not None and number >= 1:
            return PaceTarget(value=ZoneValue(value=int(number)))
        return OpenTarget()
    if zone_type == "CustomSpeedZone_t":
        low = as_number(zone.get("LowInMetersPerSecond"))
        high = as_number(zone.get("HighInMetersPerSecond"))
        if low is None or high is None or low > high:
            return OpenTarget()
        if low == high:
            return PaceTarget(value=AbsoluteValue(unit="mps", value=low))
        return PaceTarget(value=RangeValue(min=low, max=high))
    return OpenTarget()


def _encode_speed(value: Any) -> dict[str, Any]:
    if isinstance(value, ZoneValue):
        zone = {XSI_TYPE: "PredefinedSpeedZone_t", "Number": value.value}
    elif isinstance(value, RangeValue):
        zone = {
            XSI_TYPE: "CustomSpeedZone_t",
            "LowInMetersPerSecond": value.min,
            "HighInMetersPerSecond": value.max,
        }
    elif isinstance(value, AbsoluteValue) and value.unit == "mps":
        zone = {
            XSI_TYPE: "CustomSpeedZone_t",
            "LowInMetersPerSecond": value.value,
            "HighInMetersPerSecond": value.value,
        }
    else:
        return dict(NONE_TARGET)
    return {XSI_TYPE: "Speed_t", "SpeedZone": zone}


def _is_running(sport: str | None) -> bool:
    return (sport or "").lower() == "running"


def _steps_to_revolutions(value: int | float) -> int | float:
    if isinstance(value, int) and value % 2 == 0:
        return value // 2
    return value / 2


def _decode_cadence(zone: Any, sport: str | None) -> Target:
    if not isinstance(zone, dict):
        return OpenTarget()
    low = as_number(zone.get("Low"))
    high = as_number(zone.get("High"))
    if low is None or high is None or low > high:
        return OpenTarget()
    if _is_running(sport):
        low, high = _steps_to_revolutions(low), _steps_to_revolutions(high)
    if low == high:
        return CadenceTarget(value=AbsoluteValue(unit="rpm", value=low))
    return CadenceTarget(value=RangeValue(min=low, max=high))


def _encode_cadence(value: Any, sport: str | None) -> dict[str, Any]:
    if isinstance(value, RangeValue):
        low, high = value.min, value.max
    elif isinstance(value, AbsoluteValue) and value.unit == "rpm":
        low = high = value.value
    else:
        return dict(NONE_TARGET)
    if _is_running(sport):
        low, high = low * 2, high * 2
    return {
        XSI_TYPE: "Cadence_t",
        "CadenceZone": {XSI_TYPE: "CustomCadenceZone_t", "Low": low, "High": high},
    }
