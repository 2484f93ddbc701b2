"""TCX namespaces, reserved attribute names and lookup tables."""

from __future__ import annotations

TCX_NS = "http://www.garmin.com/xmlschemas/TrainingCenterDatabase/v2"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"
KAIORD_NS = "http://kaiord.dev/tcx-extensions/1.0"
TPX_NS = "http://www.garmin.com/xmlschemas/ActivityExtension/v2"

ROOT_ELEMENT = "TrainingCenterDatabase"

# Generic tree markers
ATTR_PREFIX = "@_"
TEXT_KEY = "#text"
XSI_TYPE = "@_xsi:type"

# Document metadata attributes (kaiord namespace) -> KRD metadata field
METADATA_ATTRIBUTES: dict[str, str] = {
    "@_kaiord:timeCreated": "created",
    "@_kaiord:manufacturer": "manufacturer",
    "@_kaiord:product": "product",
    "@_kaiord:serialNumber": "serial_number",
}

ORIGINAL_DURATION_TYPE = "@_kaiord:originalDurationType"
ORIGINAL_DURATION_PREFIX = "@_kaiord:originalDuration"

TCX_TO_SPORT: dict[str, str] = {
    "Running": "running",
    "Biking": "cycling",
    "Swimming": "swimming",
    "Other": "generic",
}
SPORT_TO_TCX: dict[str, str] = {sport: tcx for tcx, sport in TCX_TO_SPORT.items()}
DEFAULT_SPORT = "generic"
DEFAULT_TCX_SPORT = "Other"

# TCX intensity values that are not a plain capitalization of the KRD value
TCX_TO_INTENSITY: dict[str, str] = {"resting": "rest"}
INTENSITY_TO_TCX: dict[str, str] = {"rest": "Resting"}
