"""Workout codec: KRD workout <-> TCX ``Workout`` node."""

from __future__ import annotations

from typing import Any

from kaiord.krd.workout import ExtensionSlot, Workout
from kaiord.tcx.constants import DEFAULT_SPORT, DEFAULT_TCX_SPORT, SPORT_TO_TCX, TCX_TO_SPORT
from kaiord.tcx.step import decode_steps, encode_steps
from kaiord.workouts.blocks import reindex_steps


def decode_sport(value: Any) -> str:
    """Map a TCX ``Sport`` attribute to the KRD sport, ``generic`` when unknown."""
    return TCX_TO_SPORT.get(str(value), DEFAULT_SPORT) if value is not None else DEFAULT_SPORT


def encode_sport(sport: str | None) -> str:
    """Map a KRD sport to the TCX ``Sport`` attribute, ``Other`` when unknown."""
    return SPORT_TO_TCX.get(str(sport), DEFAULT_TCX_SPORT) if sport is not None else DEFAULT_TCX_SPORT


def decode_workout(element: dict[str, Any], custom_zones: bool = False) -> Workout:
    """Convert a TCX ``Workout`` node into a KRD workout.

    Steps are re-indexed after decoding: top-level steps are numbered among
    top-level steps only and each block's steps are numbered from 0.
    """
    sport = decode_sport(element.get("@_Sport"))
    name = element.get("Name")
    steps = decode_steps(element.get("Step"), sport=sport, custom_zones=custom_zones)
    extensions = element.get("Extensions")

    return Workout(
        name=str(name) if name not in (None, "") else None,
        sport=sport,
        steps=reindex_steps(steps),
        extensions=ExtensionSlot(tcx=dict(extensions)) if isinstance(extensions, dict) else None,
    )


def encode_workout(workout: Workout, custom_zones: bool = False) -> dict[str, Any]:
    """Convert a KRD workout into a TCX ``Workout`` node."""
    element: dict[str, Any] = {"@_Sport": encode_sport(workout.sport)}
    if workout.name:
        element["Name"] = workout.name
    element["Step"] = encode_steps(workout.steps, sport=workout.sport, custom_zones=custom_zones)
    if workout.extensions is not None and workout.extensions.tcx is not None:
        element["Extensions"] = workout.extensions.tcx
    return element
