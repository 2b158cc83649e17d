"""
Line Item Calculator - prices a single cart line.

Resolution order:
1. Volume break against the raw unit price
2. Customer tier discount on the volume-adjusted price
3. Extension (effective price × quantity)
4. Line percentage discount, then fixed line discount, capped at the subtotal
5. Cost and margin
"""
from typing import Mapping, Optional

from ..config.settings import get_settings, Settings
from .errors import InputValidationError
from .models import (
    CustomerTier,
    FixedPriceBreak,
    LineItemInput,
    LineItemResult,
    PercentOffBreak,
    TraceStep,
    VolumeBreak,
)
from .money import format_currency, round_cents, round_percent, validate_number
from .tiers import apply_customer_tier
from .volume_breaks import apply_volume_breaks


def _validate_volume_break(rule: VolumeBreak):
    if not isinstance(rule, (FixedPriceBreak, PercentOffBreak)):
        raise InputValidationError(
            f"Volume break must be a fixed price or percent off break, got {type(rule).__name__}",
            field='Volume break', constraint='invalid_type',
        )
    validate_number(rule.min_qty, 'Volume break quantity', min_value=1, integer=True)
    if isinstance(rule, FixedPriceBreak):
        validate_number(rule.price_cents, 'Volume break price', min_value=0, integer=True)
    else:
        validate_number(rule.discount_percent, 'Volume break percent', min_value=0, max_value=100)


def _zero_quantity_result(item: LineItemInput) -> LineItemResult:
    return LineItemResult(
        unit_price_cents=0,
        original_unit_price_cents=0,
        effective_unit_price_cents=0,
        quantity=0,
        subtotal_cents=0,
        line_discount_cents=0,
        tier_discount_cents=0,
        total_discount_cents=0,
        line_total_cents=0,
        cost_cents=0,
        margin_cents=0,
        margin_percent=0,
        is_tax_exempt=item.is_tax_exempt,
        tier_label='Retail',
        sku=item.sku,
        description=item.description,
        trace=(TraceStep("Quantity", "Zero quantity, line not priced", "0"),),
    )


def calculate_line_item(
    item: LineItemInput,
    tiers: Optional[Mapping[str, CustomerTier]] = None,
    settings: Optional[Settings] = None,
) -> LineItemResult:
    """
    Calculate a single line item's pricing.

    Args:
        item: The line to price
        tiers: Optional customer tier mapping replacing the built-in one
        settings: Optional settings override

    Returns:
        LineItemResult with every intermediate amount and a trace

    Raises:
        InputValidationError: if any numeric field is invalid
    """
    settings = settings or get_settings()

    quantity = validate_number(item.quantity, 'Quantity', min_value=0)
    if quantity == 0:
        return _zero_quantity_result(item)

    unit_price = validate_number(item.unit_price_cents, 'Unit price', min_value=0, integer=True)
    discount_percent = validate_number(item.discount_percent, 'Discount percent', min_value=0, max_value=100)
    discount_amount = validate_number(item.discount_amount_cents, 'Discount amount', min_value=0, integer=True)
    unit_cost = validate_number(item.cost_cents, 'Cost', min_value=0, integer=True)
    for rule in item.volume_breaks:
        _validate_volume_break(rule)

    trace = [TraceStep("Base Price", f"Quantity {quantity} at list price", format_currency(unit_price))]

    volume = apply_volume_breaks(unit_price, quantity, item.volume_breaks)
    volume_adjusted_price = volume.price_cents
    if volume.applied_break:
        trace.append(TraceStep(
            "Volume Break",
            f"{volume.applied_break.kind} break at {volume.applied_break.min_qty}+ units",
            format_currency(volume_adjusted_price),
        ))

    tier = apply_customer_tier(volume_adjusted_price, item.customer_tier, tiers)
    effective_price = tier.price_cents
    tier_discount_per_unit = tier.tier_discount_cents
    if tier_discount_per_unit:
        trace.append(TraceStep(
            "Tier Discount",
            f"{tier.tier_label} {tier.tier_discount_percent}% off",
            format_currency(effective_price),
        ))

    subtotal_cents = round_cents(effective_price * quantity)
    trace.append(TraceStep(
        "Extension",
        f"Quantity {quantity} × {format_currency(effective_price)}",
        format_currency(subtotal_cents),
    ))

    line_discount_cents = 0
    if discount_percent > 0:
        line_discount_cents = round_cents(subtotal_cents * (discount_percent / 100))
    line_discount_cents += discount_amount

    # Discounts never push the line below zero
    if line_discount_cents > subtotal_cents:
        trace.append(TraceStep(
            "Discount Cap",
            f"Line discount {format_currency(line_discount_cents)} capped at subtotal",
            format_currency(subtotal_cents),
        ))
        line_discount_cents = subtotal_cents
    elif line_discount_cents:
        trace.append(TraceStep("Line Discount", "Percent and fixed line discounts", format_currency(line_discount_cents)))

    line_total_cents = subtotal_cents - line_discount_cents

    total_cost_cents = round_cents(unit_cost * quantity)
    margin_cents = line_total_cents - total_cost_cents
    margin_percent = (margin_cents / line_total_cents) * 100 if line_total_cents > 0 else 0

    total_tier_discount_cents = round_cents(tier_discount_per_unit * quantity)

    trace.append(TraceStep("Line Total", "Subtotal less line discounts", format_currency(line_total_cents)))

    return LineItemResult(
        unit_price_cents=volume_adjusted_price,
        original_unit_price_cents=unit_price,
        effective_unit_price_cents=effective_price,
        quantity=quantity,
        subtotal_cents=subtotal_cents,
        line_discount_cents=line_discount_cents,
        tier_discount_cents=total_tier_discount_cents,
        total_discount_cents=line_discount_cents + total_tier_discount_cents,
        line_total_cents=line_total_cents,
        cost_cents=total_cost_cents,
        margin_cents=margin_cents,
        margin_percent=round_percent(margin_percent, settings.margin_decimals),
        is_tax_exempt=item.is_tax_exempt,
        tier_label=tier.tier_label,
        volume_break_applied=volume.applied_break,
        sku=item.sku,
        description=item.description,
        trace=tuple(trace),
    )


def calculate_item_price(unit_price_cents: int, quantity: int, discount_percent: float = 0) -> LineItemResult:
    """Quick single-item price calculation with no breaks, tier or cost."""
    return calculate_line_item(LineItemInput(
        unit_price_cents=unit_price_cents,
        quantity=quantity,
        discount_percent=discount_percent,
    ))
