"""Exceptions raised by the step-diff pipeline."""

from __future__ import annotations

from typing import Optional


class StepDiffError(Exception):
    """Base class for errors that abort a comparison."""


class SourceFormatError(StepDiffError, ValueError):
    """The source document has no usable test-step table."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class EmptyComparisonError(StepDiffError):
    """Neither document yielded a single record to compare."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message
            or "No comparable test step data could be found in either file. "
            "Please ensure the HTML file contains a table with a header row with "
            "'Step Order', 'Procedure', and 'Expected Outcome'."
        )


__all__ = ["StepDiffError", "SourceFormatError", "EmptyComparisonError"]
