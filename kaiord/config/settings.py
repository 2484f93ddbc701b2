from pathlib import Path
from typing import Literal

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    log_level: str = Field(default="INFO", validation_alias="KAIORD_LOG_LEVEL")
    log_file: str | None = Field(
        default=None,
        validation_alias="KAIORD_LOG_FILE",
        description="Optional log file path; console only when unset",
    )
    tcx_validator: Literal["wellformed", "xsd"] = Field(
        default="wellformed",
        validation_alias="KAIORD_TCX_VALIDATOR",
        description="Validator applied to generated TCX: structural check or XSD conformance",
    )
    tcx_xsd_path: str | None = Field(
        default=None,
        validation_alias="KAIORD_TCX_XSD_PATH",
        description="Path to TrainingCenterDatabasev2.xsd, required when tcx_validator is 'xsd'",
    )
    tcx_custom_zones: bool = Field(
        default=False,
        validation_alias="KAIORD_TCX_CUSTOM_ZONES",
        description="Map custom heart rate, speed and cadence zones to and from TCX",
    )
    tcx_pretty_print: bool = Field(
        default=True,
        validation_alias="KAIORD_TCX_PRETTY_PRINT",
        description="Indent generated TCX",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid KAIORD_LOG_LEVEL '{value}'. Valid levels are: {', '.join(sorted(valid_levels))}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("tcx_xsd_path")
    @classmethod
    def validate_xsd_path(cls, value: str | None) -> str | None:
        """Warn early when the configured schema file does not exist."""
        if value and not Path(value).is_file():
            logger.warning(f"KAIORD_TCX_XSD_PATH points to a missing file: {value}")
        return value

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )


settings = Settings()
