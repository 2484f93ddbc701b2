"""TCX reader: XML text -> KRD document."""

from __future__ import annotations

from typing import Any

from loguru import logger as default_logger

from kaiord.config.settings import settings
from kaiord.core.logger import StructuredLogger
from kaiord.errors import TcxParsingError
from kaiord.krd.document import KRD
from kaiord.tcx.constants import ROOT_ELEMENT
from kaiord.tcx.document import MISSING_ROOT_MESSAGE, decode_document
from kaiord.tcx.xml_tree import parse_xml


class TcxReader:
    """Reads TCX workout files.

    Stages run strictly in order: parse the text, check the root element,
    decode. Parse and root failures raise :class:`TcxParsingError`; errors
    raised while decoding propagate unchanged.
    """

    def __init__(self, logger: StructuredLogger | None = None, custom_zones: bool | None = None) -> None:
        self.logger = logger or default_logger
        self.custom_zones = settings.tcx_custom_zones if custom_zones is None else custom_zones

    def read(self, xml_text: str | bytes) -> KRD:
        """Convert TCX text into a KRD document.

        Args:
            xml_text: TCX document text, or raw file bytes decoded per their XML declaration

        Returns:
            The decoded KRD document

        Raises:
            TcxParsingError: If the text is not XML or lacks ``TrainingCenterDatabase``
        """
        self.logger.debug("Parsing TCX file", xml_length=len(xml_text or ""))

        try:
            tree: dict[str, Any] = parse_xml(xml_text)
        except Exception as e:
            self.logger.error("Failed to parse TCX XML", error=str(e))
            raise TcxParsingError("Failed to parse TCX file", e) from e

        if ROOT_ELEMENT not in tree:
            error = TcxParsingError(MISSING_ROOT_MESSAGE)
            self.logger.error("Invalid TCX structure", error=str(error))
            raise error

        self.logger.info("TCX file parsed successfully")

        krd = decode_document(tree, custom_zones=self.custom_zones)
        workout = krd.extensions.workout
        self.logger.info(
            "TCX decoded to KRD",
            sport=krd.metadata.sport,
            step_count=len(workout.steps) if workout else 0,
        )
        return krd
