"""Step codec: KRD steps and repetition blocks <-> TCX ``Step`` nodes.

Step-level ``Extensions`` are stored verbatim in ``step.extensions.tcx`` and
re-emitted unchanged. The only content read from them is the power target
carried in ``Extensions/TPX/Watts``. A power target is synthesized into a new
``TPX`` extension only when the step has no stored extensions.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from loguru import logger

from kaiord.krd.target import AbsoluteValue, OpenTarget, PowerTarget, Target
from kaiord.krd.workout import ExtensionSlot, Intensity, RepetitionBlock, WorkoutStep
from kaiord.tcx.constants import INTENSITY_TO_TCX, TCX_TO_INTENSITY, TPX_NS, XSI_TYPE
from kaiord.tcx.duration import decode_duration, encode_duration, tcx_type
from kaiord.tcx.target import decode_target, encode_target
from kaiord.tcx.xml_tree import as_list, as_number, local_name

_INTENSITY_VALUES = {intensity.value for intensity in Intensity}


def decode_step(
    element: dict[str, Any],
    step_index: int,
    sport: str | None = None,
    custom_zones: bool = False,
) -> WorkoutStep:
    """Convert a TCX ``Step_t`` node into a KRD step.

    Args:
        element: The step node from the generic tree
        step_index: Index assigned to the step
        sport: KRD sport of the enclosing workout
        custom_zones: Forwarded to the target codec

    Returns:
        The decoded step
    """
    duration = decode_duration(element.get("Duration"))
    target: Target = decode_target(element.get("Target"), sport=sport, custom_zones=custom_zones)

    extensions = element.get("Extensions")
    if isinstance(target, OpenTarget):
        watts = extract_power_watts(extensions)
        if watts is not None:
            target = PowerTarget(value=AbsoluteValue(unit="watts", value=watts))

    name = element.get("Name")
    step = WorkoutStep(
        step_index=step_index,
        duration=duration,
        target=target,
        intensity=decode_intensity(element.get("Intensity")),
        name=str(name) if name not in (None, "") else None,
        extensions=ExtensionSlot(tcx=dict(extensions)) if isinstance(extensions, dict) else None,
    )
    return step


def encode_step(
    step: WorkoutStep,
    step_id: int,
    sport: str | None = None,
    custom_zones: bool = False,
) -> dict[str, Any]:
    """Convert a KRD step into a TCX ``Step_t`` node.

    Keys follow the schema's element order: StepId, Name, Duration,
    Intensity, Target, Extensions.
    """
    element: dict[str, Any] = {XSI_TYPE: "Step_t", "StepId": step_id}
    if step.name:
        element["Name"] = step.name
    element["Duration"] = encode_duration(step.duration)
    if step.intensity:
        element["Intensity"] = encode_intensity(step.intensity)
    element["Target"] = encode_target(step.target, sport=sport, custom_zones=custom_zones)

    extensions = _encode_step_extensions(step)
    if extensions is not None:
        element["Extensions"] = extensions
    return element


def decode_steps(
    value: Any,
    sport: str | None = None,
    custom_zones: bool = False,
) -> list[WorkoutStep | RepetitionBlock]:
    """Decode the ``Step`` children of a workout in document order.

    ``Repeat_t`` nodes become repetition blocks without an id. Step indices
    are provisional; callers re-index the result.
    """
    entries: list[WorkoutStep | RepetitionBlock] = []
    for position, element in enumerate(as_list(value)):
        if not isinstance(element, dict):
            logger.warning(f"Skipping malformed TCX step at position {position}")
            continue
        if tcx_type(element) == "Repeat_t":
            entries.append(_decode_repeat(element, sport, custom_zones))
        else:
            entries.append(decode_step(element, position, sport=sport, custom_zones=custom_zones))
    return entries


def encode_steps(
    entries: Sequence[WorkoutStep | RepetitionBlock],
    sport: str | None = None,
    custom_zones: bool = False,
) -> list[dict[str, Any]]:
    """Encode workout entries, numbering ``StepId`` from 1 in document order.

    For a workout without repetition blocks ``StepId`` is the entry's array
    position plus one.
    """
    encoded: list[dict[str, Any]] = []
    step_id = 1
    for entry in entries:
        if isinstance(entry, RepetitionBlock):
            repeat: dict[str, Any] = {
                XSI_TYPE: "Repeat_t",
                "StepId": step_id,
                "Repetitions": entry.repeat_count,
            }
            step_id += 1
            children = []
            for child in entry.steps:
                children.append(encode_step(child, step_id, sport=sport, custom_zones=custom_zones))
                step_id += 1
            repeat["Child"] = children
            encoded.append(repeat)
        else:
            encoded.append(encode_step(entry, step_id, sport=sport, custom_zones=custom_zones))
            step_id += 1
    return encoded


def decode_intensity(value: Any) -> Intensity | None:
    if value in (None, ""):
        return None
    normalized = str(value).lower()
    normalized = TCX_TO_INTENSITY.get(normalized, normalized)
    if normalized not in _INTENSITY_VALUES:
        logger.warning(f"Unknown TCX intensity '{value}', dropping it")
        return None
    return Intensity(normalized)


def encode_intensity(intensity: Intensity | str) -> str:
    value = str(intensity)
    return INTENSITY_TO_TCX.get(value, value[:1].upper() + value[1:])


def extract_power_watts(extensions: Any) -> int | float | None:
    """Read the power target from a step's ``Extensions`` node.

    Looks for ``TPX/Watts`` (any namespace prefix) and falls back to a bare
    ``Power`` value.
    """
    if not isinstance(extensions, dict):
        return None
    for key, value in extensions.items():
        if local_name(key) != "TPX":
            continue
        for tpx in as_list(value):
            if not isinstance(tpx, dict):
                continue
            for tpx_key, watts in tpx.items():
                if local_name(tpx_key) == "Watts":
                    number = as_number(watts)
                    if number is not None:
                        return number
    return as_number(extensions.get("Power"))


def _encode_step_extensions(step: WorkoutStep) -> dict[str, Any] | None:
    if step.extensions is not None and step.extensions.tcx is not None:
        return step.extensions.tcx
    target = step.target
    if isinstance(target, PowerTarget) and isinstance(target.value, AbsoluteValue) and target.value.unit == "watts":
        return {"TPX": {"@_xmlns": TPX_NS, "Watts": target.value.value}}
    return None


def _decode_repeat(element: dict[str, Any], sport: str | None, custom_zones: bool) -> RepetitionBlock:
    repetitions = as_number(element.get("Repetitions"))
    if repetitions is None or repetitions < 1:
        logger.warning(f"Repeat_t without valid Repetitions ({element.get('Repetitions')!r}), using 1")
        repetitions = 1

    steps: list[WorkoutStep] = []
    for child in as_list(element.get("Child")):
        if not isinstance(child, dict):
            continue
        if tcx_type(child) == "Repeat_t":
            logger.warning("Nested Repeat_t is not supported, skipping it")
            continue
        steps.append(decode_step(child, len(steps), sport=sport, custom_zones=custom_zones))
    return RepetitionBlock(repeat_count=int(repetitions), steps=steps)
