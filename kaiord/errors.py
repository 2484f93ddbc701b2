"""Domain-specific errors for KRD and TCX conversion.

Read and write failures surface as one of two kinds: a parsing error for
malformed input or a failed conversion stage, and a validation error for
generated XML that does not conform to the schema.
"""

from __future__ import annotations

from dataclasses import dataclass


class KaiordError(Exception):
    """Base exception for all kaiord errors."""

    pass


class TcxParsingError(KaiordError):
    """Raised when TCX text cannot be parsed or a conversion stage fails.

    Attributes:
        cause: Underlying exception, when the error wraps one
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


@dataclass(frozen=True)
class FieldViolation:
    """One schema violation reported for generated output."""

    field: str
    message: str


class TcxValidationError(KaiordError):
    """Raised when generated TCX does not conform to the schema.

    Attributes:
        errors: Non-empty list of field violations
    """

    def __init__(self, message: str, errors: list[FieldViolation]) -> None:
        if not errors:
            raise ValueError("TcxValidationError requires at least one violation")
        super().__init__(message)
        self.message = message
        self.errors = errors

    def __str__(self) -> str:
        details = "; ".join(f"{error.field}: {error.message}" for error in self.errors)
        return f"{self.message} ({details})"


class KrdValidationError(KaiordError):
    """Raised when KRD data violates domain bounds or cannot be loaded."""

    pass


class BlockNotFoundError(KaiordError, LookupError):
    """Raised when no repetition block carries the requested id."""

    def __init__(self, block_id: str) -> None:
        super().__init__(f"Repetition block not found: {block_id}")
        self.block_id = block_id


class StepNotFoundError(KaiordError, LookupError):
    """Raised when no step carries the requested step index."""

    def __init__(self, step_index: int, block_id: str | None = None) -> None:
        scope = f" in block {block_id}" if block_id else ""
        super().__init__(f"Step not found: index {step_index}{scope}")
        self.step_index = step_index
        self.block_id = block_id


class ConfigurationError(KaiordError, ValueError):
    """Raised when settings select a strategy without what it needs."""

    pass
