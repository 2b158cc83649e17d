"""
Margin helpers - margin, markup, and the price needed for a target margin.
"""
from .errors import ComputationBoundaryError
from .money import round_cents, round_percent, validate_number


def calculate_price_for_margin(cost_cents: int, target_margin_percent: float) -> int:
    """
    Calculate the unit price that yields a target margin.

    margin = (price - cost) / price, so price = cost / (1 - margin).

    Raises:
        ComputationBoundaryError: if the target is 100% or more, or negative
    """
    cost_cents = validate_number(cost_cents, 'Cost', min_value=0)
    target_margin_percent = validate_number(target_margin_percent, 'Target margin', allow_negative=True)

    if target_margin_percent >= 100:
        raise ComputationBoundaryError("Target margin cannot be 100% or greater")
    if target_margin_percent < 0:
        raise ComputationBoundaryError("Target margin cannot be negative")

    return round_cents(cost_cents / (1 - target_margin_percent / 100))


def calculate_margin(price_cents: int, cost_cents: int) -> float:
    """Margin as a percent of price; 0 when the price is not positive."""
    price_cents = validate_number(price_cents, 'Price', allow_negative=True)
    cost_cents = validate_number(cost_cents, 'Cost', allow_negative=True)
    if price_cents <= 0:
        return 0
    return round_percent((price_cents - cost_cents) / price_cents * 100)


def calculate_markup(price_cents: int, cost_cents: int) -> float:
    """Markup as a percent of cost; 0 when the cost is not positive."""
    price_cents = validate_number(price_cents, 'Price', allow_negative=True)
    cost_cents = validate_number(cost_cents, 'Cost', allow_negative=True)
    if cost_cents <= 0:
        return 0
    return round_percent((price_cents - cost_cents) / cost_cents * 100)
