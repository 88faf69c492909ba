# millcalc/errors.py
"""Typed failures raised by the calculation pipeline.

Everything derives from ValueError so callers that only care about
"bad input" can keep catching that.
"""

from __future__ import annotations

from dataclasses import dataclass


class CalculationError(ValueError):
    """Base class for fatal calculation failures."""


class InvalidParameterError(CalculationError):
    """A physical quantity is non-positive or otherwise out of its domain."""


class MissingMetadataError(CalculationError):
    """A tool type needs metadata (angle, body diameter) that the tool lacks."""


class UnknownTypeError(CalculationError):
    """A tool type or cut type string does not name a known member."""


class CatalogError(CalculationError):
    def __init__(self, message: str, problems: list[str] | None = None):
        self.problems = list(problems or [])
        if self.problems:
            message = f"{message}: {'; '.join(self.problems)}"
        super().__init__(message)


@dataclass(frozen=True)
class ValidationIssue:
    field: str
    message: str


class ValidationFailed(CalculationError):
    """Structural validation errors; the pipeline did not run."""

    def __init__(self, errors: list[ValidationIssue]):
        self.errors = list(errors)
        joined = ", ".join(e.message for e in self.errors) or "unknown error"
        super().__init__(f"Validation failed: {joined}")
