"""TCX writer: KRD document -> validated XML text."""

from __future__ import annotations

from typing import Any

from loguru import logger as default_logger

from kaiord.config.settings import settings
from kaiord.core.logger import StructuredLogger
from kaiord.errors import FieldViolation, TcxParsingError, TcxValidationError
from kaiord.krd.document import KRD
from kaiord.tcx.document import encode_document
from kaiord.tcx.validators import TcxValidator, get_validator
from kaiord.tcx.xml_tree import build_xml

SCHEMA_VIOLATION_MESSAGE = "Generated TCX file does not conform to XSD schema"


class TcxWriter:
    """Writes KRD documents as TCX.

    Stages run strictly in order: encode to a generic tree, serialize, then
    await the validator. Encode and serialize failures raise
    :class:`TcxParsingError` carrying the cause; an invalid result raises
    :class:`TcxValidationError` with every violation.
    """

    def __init__(
        self,
        validator: TcxValidator | None = None,
        logger: StructuredLogger | None = None,
        custom_zones: bool | None = None,
        pretty_print: bool | None = None,
    ) -> None:
        self.validator = validator or get_validator()
        self.logger = logger or default_logger
        self.custom_zones = settings.tcx_custom_zones if custom_zones is None else custom_zones
        self.pretty_print = settings.tcx_pretty_print if pretty_print is None else pretty_print

    async def write(self, krd: KRD) -> str:
        """Convert a KRD document into TCX text.

        Raises:
            TcxParsingError: If encoding or serialization fails
            TcxValidationError: If the generated XML fails validation
        """
        self.logger.debug("Encoding KRD to TCX")

        try:
            tree: dict[str, Any] = encode_document(krd, custom_zones=self.custom_zones)
        except Exception as e:
            self.logger.error("Failed to convert KRD to TCX structure", error=str(e))
            raise TcxParsingError("Failed to convert KRD to TCX", e) from e

        try:
            xml_text = build_xml(tree, pretty_print=self.pretty_print)
        except Exception as e:
            self.logger.error("Failed to build TCX XML", error=str(e))
            raise TcxParsingError("Failed to build TCX XML", e) from e

        self.logger.debug("Validating generated TCX")

        result = await self.validator(xml_text)
        if not result.valid:
            violations = [FieldViolation(field=issue.path, message=issue.message) for issue in result.errors]
            if not violations:
                violations = [FieldViolation(field="/", message="Validator rejected the document without details")]
            self.logger.error(SCHEMA_VIOLATION_MESSAGE, errors=[issue.message for issue in result.errors])
            raise TcxValidationError(SCHEMA_VIOLATION_MESSAGE, violations)

        self.logger.info("KRD encoded to TCX successfully", xml_length=len(xml_text))
        return xml_text
