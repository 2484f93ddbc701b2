"""Tests for TcxWriter."""

from collections.abc import Callable
from unittest.mock import MagicMock

import pytest
from lxml import etree

from kaiord.errors import TcxParsingError, TcxValidationError
from kaiord.krd.document import KRD, KrdExtensions, KrdMetadata
from kaiord.krd.duration import CaloriesDuration
from kaiord.krd.target import AbsoluteValue, PowerTarget
from kaiord.krd.workout import ExtensionSlot, Workout
from kaiord.tcx.constants import KAIORD_NS, TCX_NS, TPX_NS, XSI_NS
from kaiord.tcx.validators import ValidationIssue, ValidationResult, WellFormednessValidator
from kaiord.tcx.writer import SCHEMA_VIOLATION_MESSAGE, TcxWriter


class StubValidator:
    """Validator double returning a fixed result and recording its input."""

    def __init__(self, result: ValidationResult) -> None:
        self.result = result
        self.calls: list[str] = []

    async def __call__(self, xml: str) -> ValidationResult:
        self.calls.append(xml)
        return self.result


def _writer(mock_logger: MagicMock, validator=None) -> TcxWriter:
    return TcxWriter(validator=validator or WellFormednessValidator(), logger=mock_logger, custom_zones=False)


def _root(xml: str) -> etree._Element:
    return etree.fromstring(xml.encode("utf-8"))


@pytest.mark.asyncio
async def test_writes_power_target_as_tpx(make_step: Callable, make_krd: Callable, mock_logger: MagicMock) -> None:
    """Test that a watts power target becomes Extensions/TPX/Watts."""
    step = make_step(0, target=PowerTarget(value=AbsoluteValue(unit="watts", value=250)))
    krd = make_krd(Workout(name="Power", sport="cycling", steps=[step]))

    xml = await _writer(mock_logger).write(krd)

    root = _root(xml)
    watts = root.find(
        f"{{{TCX_NS}}}Workouts/{{{TCX_NS}}}Workout/{{{TCX_NS}}}Step/"
        f"{{{TCX_NS}}}Extensions/{{{TPX_NS}}}TPX/{{{TPX_NS}}}Watts"
    )
    assert watts is not None
    assert watts.text == "250"
    step_element = root.find(f".//{{{TCX_NS}}}Step")
    assert step_element.get(f"{{{XSI_NS}}}type") == "Step_t"
    assert step_element.find(f"{{{TCX_NS}}}Target").get(f"{{{XSI_NS}}}type") == "None_t"


@pytest.mark.asyncio
async def test_writes_calories_with_kaiord_attributes(
    make_step: Callable, make_krd: Callable, mock_logger: MagicMock
) -> None:
    """Test that a calories step is written as LapButton_t with kaiord attributes."""
    step = make_step(0, duration=CaloriesDuration(calories=500))
    krd = make_krd(Workout(sport="running", steps=[step]))

    xml = await _writer(mock_logger).write(krd)

    duration = _root(xml).find(f".//{{{TCX_NS}}}Duration")
    assert duration.get(f"{{{XSI_NS}}}type") == "LapButton_t"
    assert duration.get(f"{{{KAIORD_NS}}}originalDurationType") == "calories"
    assert duration.get(f"{{{KAIORD_NS}}}originalDurationCalories") == "500"


@pytest.mark.asyncio
async def test_writes_sport_and_metadata(flat_workout: Workout, make_krd: Callable, mock_logger: MagicMock) -> None:
    """Test the Sport attribute and root metadata attributes."""
    krd = make_krd(flat_workout, product="fenix7")

    xml = await _writer(mock_logger).write(krd)

    root = _root(xml)
    assert root.get(f"{{{KAIORD_NS}}}product") == "fenix7"
    assert root.find(f".//{{{TCX_NS}}}Workout").get("Sport") == "Running"
    step_ids = [element.text for element in root.iter(f"{{{TCX_NS}}}StepId")]
    assert step_ids == ["1", "2", "3", "4"]
    mock_logger.info.assert_called_with("KRD encoded to TCX successfully", xml_length=len(xml))


@pytest.mark.asyncio
async def test_validator_receives_generated_xml(flat_workout: Workout, make_krd: Callable, mock_logger: MagicMock) -> None:
    """Test that the validator sees exactly the returned text."""
    validator = StubValidator(ValidationResult(valid=True))

    xml = await _writer(mock_logger, validator).write(make_krd(flat_workout))

    assert validator.calls == [xml]


@pytest.mark.asyncio
async def test_invalid_result_raises_validation_error(
    flat_workout: Workout, make_krd: Callable, mock_logger: MagicMock
) -> None:
    """Test that validator issues become field violations."""
    validator = StubValidator(
        ValidationResult(
            valid=False,
            errors=[
                ValidationIssue(path="/TrainingCenterDatabase/Workouts", message="bad element"),
                ValidationIssue(path="line 4", message="bad value"),
            ],
        )
    )

    with pytest.raises(TcxValidationError) as exc_info:
        await _writer(mock_logger, validator).write(make_krd(flat_workout))

    error = exc_info.value
    assert error.message == SCHEMA_VIOLATION_MESSAGE
    assert [(violation.field, violation.message) for violation in error.errors] == [
        ("/TrainingCenterDatabase/Workouts", "bad element"),
        ("line 4", "bad value"),
    ]


@pytest.mark.asyncio
async def test_missing_workout_raises_parsing_error(mock_logger: MagicMock) -> None:
    """Test that a KRD without workout fails in the encode stage."""
    krd = KRD(metadata=KrdMetadata(sport="running"), extensions=KrdExtensions())

    with pytest.raises(TcxParsingError, match="Failed to convert KRD to TCX") as exc_info:
        await _writer(mock_logger).write(krd)

    assert "does not contain workout data" in str(exc_info.value)


@pytest.mark.asyncio
async def test_undeclared_extension_prefix_fails_build(
    make_step: Callable, make_krd: Callable, mock_logger: MagicMock
) -> None:
    """Test that an extension bag using an unknown prefix fails to serialize."""
    step = make_step(0, extensions=ExtensionSlot(tcx={"ns9:Thing": 1}))
    krd = make_krd(Workout(sport="running", steps=[step]))

    with pytest.raises(TcxParsingError, match="Failed to build TCX XML"):
        await _writer(mock_logger).write(krd)
