"""
Monetary primitives - cent rounding, conversion, formatting and validation.

All money inside the engine is an integer number of cents. Floats only
appear at the boundary (dollar input) and in display-only percentages.
"""
import math
from numbers import Integral, Real
from typing import Optional

from .errors import InputValidationError


def _is_missing(value) -> bool:
    if value is None:
        return True
    try:
        return math.isnan(value)
    except TypeError:
        return False


def round_cents(cents) -> int:
    """
    Round to the nearest whole cent, halves going up.

    None, NaN and anything that is not a real number round to 0
    instead of raising.
    """
    if _is_missing(cents) or isinstance(cents, bool) or not isinstance(cents, Real):
        return 0
    if isinstance(cents, int):
        return cents
    return int(math.floor(cents + 0.5))


def dollars_to_cents(dollars) -> int:
    """Convert a dollar amount (number or numeric string) to integer cents."""
    if isinstance(dollars, str):
        try:
            dollars = float(dollars)
        except ValueError:
            return 0
    if _is_missing(dollars):
        return 0
    # 0.1 + 0.2 dollars is 30.000000000000004 cents before rounding
    return round_cents(float(dollars) * 100)


def cents_to_dollars(cents) -> float:
    """Convert integer cents to dollars."""
    if _is_missing(cents):
        return 0.0
    return cents / 100


def format_currency(cents) -> str:
    """Format cents as a display string, e.g. 12345 -> "$123.45"."""
    return f"${cents_to_dollars(cents):.2f}"


def round_percent(value: float, decimals: int = 2) -> float:
    """Round a display percentage to a fixed number of decimals."""
    scale = 10 ** decimals
    return round_cents(value * scale) / scale


def validate_number(
    value,
    field_name: str,
    allow_negative: bool = False,
    allow_zero: bool = True,
    min_value: Optional[float] = None,
    max_value: Optional[float] = None,
    integer: bool = False,
):
    """
    Validate a numeric input and return it unchanged.

    Args:
        value: Candidate number
        field_name: Human-readable field name used in the error message
        allow_negative: Accept values below zero
        allow_zero: Accept exactly zero
        min_value: Inclusive lower bound
        max_value: Inclusive upper bound
        integer: Require a whole number (any cents field)

    Raises:
        InputValidationError: naming the field and the violated constraint
    """
    if isinstance(value, bool) or not isinstance(value, Real) or _is_missing(value):
        raise InputValidationError(
            f"{field_name} must be a valid number",
            field=field_name, constraint="not_a_number",
        )

    if integer and not isinstance(value, Integral):
        raise InputValidationError(
            f"{field_name} must be a whole number",
            field=field_name, constraint="not_an_integer",
        )

    if not allow_negative and value < 0:
        raise InputValidationError(
            f"{field_name} cannot be negative",
            field=field_name, constraint="negative",
        )

    if not allow_zero and value == 0:
        raise InputValidationError(
            f"{field_name} cannot be zero",
            field=field_name, constraint="zero",
        )

    if min_value is not None and value < min_value:
        raise InputValidationError(
            f"{field_name} must be at least {min_value}",
            field=field_name, constraint="below_min",
        )

    if max_value is not None and value > max_value:
        raise InputValidationError(
            f"{field_name} must be at most {max_value}",
            field=field_name, constraint="above_max",
        )

    return value
