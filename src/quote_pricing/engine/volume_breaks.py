"""
Volume Break Resolver - picks the quantity break that applies to a line.

Breaks are checked from the highest threshold down and the first one the
quantity reaches wins. Percentage breaks always discount the base price.
"""
import logging
from typing import Iterable, Optional

from .models import (
    AppliedBreak,
    FixedPriceBreak,
    PercentOffBreak,
    VolumeBreak,
    VolumeBreakResult,
)
from .money import round_cents

logger = logging.getLogger(__name__)


def find_volume_break(quantity: int, volume_breaks: Iterable[VolumeBreak]) -> Optional[VolumeBreak]:
    """Return the break with the highest min_qty that quantity reaches, if any."""
    ordered = sorted(volume_breaks or (), key=lambda b: b.min_qty, reverse=True)
    for rule in ordered:
        if quantity >= rule.min_qty:
            return rule
    return None


def apply_volume_breaks(
    base_price_cents: int,
    quantity: int,
    volume_breaks: Iterable[VolumeBreak] = (),
) -> VolumeBreakResult:
    """
    Resolve the unit price for a quantity.

    Args:
        base_price_cents: Base unit price in cents
        quantity: Quantity being purchased
        volume_breaks: FixedPriceBreak / PercentOffBreak rules

    Returns:
        VolumeBreakResult with the adjusted unit price and the applied break
        (None when no break qualifies)
    """
    rule = find_volume_break(quantity, volume_breaks)
    if rule is None:
        return VolumeBreakResult(price_cents=base_price_cents)

    if isinstance(rule, FixedPriceBreak):
        price = rule.price_cents
        applied = AppliedBreak(rule=rule, kind="fixed_price")
    elif isinstance(rule, PercentOffBreak):
        discount = base_price_cents * (rule.discount_percent / 100)
        price = round_cents(base_price_cents - discount)
        applied = AppliedBreak(rule=rule, kind="percentage")
    else:
        raise TypeError(f"Unsupported volume break type: {type(rule).__name__}")

    logger.debug(
        "Volume break min_qty=%s (%s) applied for qty %s: %s -> %s",
        rule.min_qty, applied.kind, quantity, base_price_cents, price,
    )
    return VolumeBreakResult(price_cents=price, applied_break=applied)
