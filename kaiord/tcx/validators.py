"""Validators for generated TCX text.

A validator is an async callable ``validator(xml) -> ValidationResult``. Two
strategies are provided: a structural well-formedness check that needs no
schema file, and full XSD conformance through ``lxml.etree.XMLSchema``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from loguru import logger
from lxml import etree

from kaiord.config.settings import Settings, settings as default_settings
from kaiord.errors import ConfigurationError
from kaiord.tcx.constants import ROOT_ELEMENT, TCX_NS
from kaiord.tcx.xml_tree import to_xml_bytes


@dataclass(frozen=True)
class ValidationIssue:
    path: str
    message: str


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: list[ValidationIssue] = field(default_factory=list)


class TcxValidator(Protocol):
    async def __call__(self, xml: str | bytes) -> ValidationResult: ...


def _parse(xml: str | bytes) -> tuple[etree._Element | None, list[ValidationIssue]]:
    if not xml or not xml.strip():
        return None, [ValidationIssue(path="/", message="XML document is empty")]
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        return etree.fromstring(to_xml_bytes(xml), parser), []
    except etree.XMLSyntaxError as e:
        return None, [ValidationIssue(path=f"line {e.lineno}", message=f"XML syntax error: {e.msg}")]


class WellFormednessValidator:
    """Checks that the text is well-formed XML rooted at ``TrainingCenterDatabase``."""

    async def __call__(self, xml: str | bytes) -> ValidationResult:
        root, errors = _parse(xml)
        if root is None:
            return ValidationResult(valid=False, errors=errors)
        if etree.QName(root).localname != ROOT_ELEMENT:
            return ValidationResult(
                valid=False,
                errors=[ValidationIssue(path="/", message=f"Root element must be {ROOT_ELEMENT}")],
            )
        return ValidationResult(valid=True)


class XsdSchemaValidator:
    """Validates against the TCX XSD.

    The schema file is loaded once, on first use. Validation runs in a worker
    thread so the event loop is not blocked by large documents.
    """

    def __init__(self, xsd_path: str | Path) -> None:
        self.xsd_path = Path(xsd_path)
        self._schema: etree.XMLSchema | None = None

    @property
    def schema(self) -> etree.XMLSchema:
        if self._schema is None:
            logger.debug(f"Loading TCX schema from {self.xsd_path}")
            self._schema = etree.XMLSchema(etree.parse(str(self.xsd_path)))
        return self._schema

    async def __call__(self, xml: str | bytes) -> ValidationResult:
        return await asyncio.to_thread(self.validate_sync, xml)

    def validate_sync(self, xml: str | bytes) -> ValidationResult:
        root, errors = _parse(xml)
        if root is None:
            return ValidationResult(valid=False, errors=errors)

        schema = self.schema
        if schema.validate(root):
            return ValidationResult(valid=True)

        issues = [
            ValidationIssue(path=entry.path or f"line {entry.line}", message=entry.message)
            for entry in schema.error_log
        ]
        if not issues:
            issues = [ValidationIssue(path="/", message=f"Document does not conform to {TCX_NS}")]
        return ValidationResult(valid=False, errors=issues)


def get_validator(config: Settings | None = None) -> TcxValidator:
    """Build the validator selected by settings.

    Raises:
        ConfigurationError: If XSD validation is selected without a schema path
    """
    config = config or default_settings
    if config.tcx_validator == "xsd":
        if not config.tcx_xsd_path:
            raise ConfigurationError("KAIORD_TCX_XSD_PATH must be set when KAIORD_TCX_VALIDATOR=xsd")
        return XsdSchemaValidator(config.tcx_xsd_path)
    return WellFormednessValidator()
