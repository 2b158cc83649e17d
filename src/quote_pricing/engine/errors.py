"""
Engine errors.

Every failure the engine raises is deterministic: the same input fails the
same way, so callers fix the input rather than retry.
"""
from typing import Optional


class PricingError(ValueError):
    """Base class for all pricing engine errors."""


class InputValidationError(PricingError):
    """A numeric input is missing, not a number, or outside its allowed range."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        constraint: Optional[str] = None,
        line_index: Optional[int] = None,
    ):
        super().__init__(message)
        self.field = field
        self.constraint = constraint
        self.line_index = line_index

    def for_line(self, line_index: int) -> 'InputValidationError':
        """Return a copy of this error prefixed with a 1-based line number."""
        return InputValidationError(
            f"Line item {line_index}: {self}",
            field=self.field,
            constraint=self.constraint,
            line_index=line_index,
        )


class ComputationBoundaryError(PricingError):
    """An inverse calculation has no defined answer for the given input."""
