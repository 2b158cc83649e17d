"""
Pricing Engine - order-level aggregation with traceability.

Prices every line, applies the order discount, splits that discount between
taxable and exempt lines, taxes the taxable share, and derives the grand
total and the order margin.
"""
import logging
from typing import Mapping, Optional

from ..config.settings import get_settings, Settings
from .errors import InputValidationError
from .line_items import calculate_line_item
from .models import (
    CustomerTier,
    DiscountBreakdown,
    FormattedTotals,
    LineItemInput,
    LineItemResult,
    MarginBreakdown,
    OrderInput,
    OrderResult,
    ProvinceTaxRule,
    TaxedAmount,
    TaxResult,
    TraceStep,
)
from .money import format_currency, round_cents, round_percent, validate_number
from .schemas import parse_order_payload
from .tax import add_tax, calculate_taxes, extract_tax

logger = logging.getLogger(__name__)


def _taxable_amount(lines: tuple[LineItemResult, ...], subtotal_cents: int, order_discount_cents: int) -> tuple[int, int]:
    """
    Apportion the order discount to the taxable lines.

    Returns (taxable_amount_cents, apportioned_discount_cents).
    """
    taxable_subtotal = sum(line.line_total_cents for line in lines if not line.is_tax_exempt)
    taxable_ratio = taxable_subtotal / subtotal_cents if subtotal_cents > 0 else 0
    apportioned = round_cents(order_discount_cents * taxable_ratio)
    return taxable_subtotal - apportioned, apportioned


def calculate_order(
    order: OrderInput,
    tiers: Optional[Mapping[str, CustomerTier]] = None,
    tax_rates: Optional[Mapping[str, ProvinceTaxRule]] = None,
    settings: Optional[Settings] = None,
) -> OrderResult:
    """
    Calculate complete order pricing.

    Args:
        order: Lines plus order-level discount, province, tier and exemption
        tiers: Optional customer tier mapping replacing the built-in one
        tax_rates: Optional tax table replacing the built-in one
        settings: Optional settings override

    Returns:
        OrderResult with totals, discount/tax/margin breakdowns and trace

    Raises:
        InputValidationError: for an invalid order field, or for the first
            invalid line (message prefixed with its 1-based number)
    """
    settings = settings or get_settings()
    province = order.province or settings.default_province
    customer_tier = order.customer_tier or settings.default_tier

    order_discount_percent = validate_number(
        order.order_discount_percent, 'Order discount percent', min_value=0, max_value=100
    )
    order_discount_amount = validate_number(
        order.order_discount_cents, 'Order discount amount', min_value=0, integer=True
    )

    trace = [TraceStep("Order", f"{len(order.items)} line(s), tier {customer_tier}, province {province}")]

    lines = []
    for index, item in enumerate(order.items, start=1):
        line_input = LineItemInput(
            unit_price_cents=item.unit_price_cents,
            quantity=item.quantity,
            discount_percent=item.discount_percent,
            discount_amount_cents=item.discount_amount_cents,
            cost_cents=item.cost_cents,
            volume_breaks=item.volume_breaks,
            customer_tier=customer_tier,
            is_tax_exempt=item.is_tax_exempt or order.is_tax_exempt,
            sku=item.sku,
            description=item.description,
        )
        try:
            lines.append(calculate_line_item(line_input, tiers, settings))
        except InputValidationError as e:
            raise e.for_line(index) from e
    lines = tuple(lines)

    subtotal_cents = sum(line.line_total_cents for line in lines)
    line_discounts_cents = sum(line.line_discount_cents for line in lines)
    tier_discounts_cents = sum(line.tier_discount_cents for line in lines)
    trace.append(TraceStep("Subtotal", "Sum of line totals", format_currency(subtotal_cents)))

    order_discount_cents = 0
    if order_discount_percent > 0:
        order_discount_cents = round_cents(subtotal_cents * (order_discount_percent / 100))
    order_discount_cents += order_discount_amount
    order_discount_cents = min(order_discount_cents, subtotal_cents)
    if order_discount_cents:
        trace.append(TraceStep("Order Discount", f"{order_discount_percent}% plus fixed", format_currency(order_discount_cents)))

    discounted_subtotal_cents = subtotal_cents - order_discount_cents

    if order.is_tax_exempt:
        taxable_amount_cents = 0
        trace.append(TraceStep("Taxable Amount", "Order is tax exempt", format_currency(0)))
    else:
        taxable_amount_cents, apportioned = _taxable_amount(lines, subtotal_cents, order_discount_cents)
        trace.append(TraceStep(
            "Taxable Amount",
            f"Taxable lines less {format_currency(apportioned)} of the order discount",
            format_currency(taxable_amount_cents),
        ))

    taxes = calculate_taxes(taxable_amount_cents, province, order.is_tax_exempt, tax_rates)
    trace.append(TraceStep("Tax", taxes.tax_label, format_currency(taxes.total_tax_cents)))

    grand_total_cents = discounted_subtotal_cents + taxes.total_tax_cents
    trace.append(TraceStep("Grand Total", "Discounted subtotal plus tax", format_currency(grand_total_cents)))

    total_cost_cents = sum(line.cost_cents for line in lines)
    total_margin_cents = discounted_subtotal_cents - total_cost_cents
    margin_percent = (
        (total_margin_cents / discounted_subtotal_cents) * 100 if discounted_subtotal_cents > 0 else 0
    )

    total_discounts_cents = line_discounts_cents + tier_discounts_cents + order_discount_cents

    logger.debug(
        "Order priced: %d line(s), subtotal=%d, order_discount=%d, tax=%d, grand_total=%d",
        len(lines), subtotal_cents, order_discount_cents, taxes.total_tax_cents, grand_total_cents,
    )

    return OrderResult(
        lines=lines,
        item_count=len(lines),
        total_quantity=sum(line.quantity for line in lines),
        subtotal_cents=subtotal_cents,
        discounted_subtotal_cents=discounted_subtotal_cents,
        discounts=DiscountBreakdown(
            line_discounts_cents=line_discounts_cents,
            tier_discounts_cents=tier_discounts_cents,
            order_discount_cents=order_discount_cents,
            order_discount_percent=order_discount_percent,
            total_discounts_cents=total_discounts_cents,
        ),
        taxes=taxes,
        grand_total_cents=grand_total_cents,
        margins=MarginBreakdown(
            total_cost_cents=total_cost_cents,
            total_margin_cents=total_margin_cents,
            margin_percent=round_percent(margin_percent, settings.margin_decimals),
        ),
        formatted=FormattedTotals(
            subtotal=format_currency(subtotal_cents),
            discounted_subtotal=format_currency(discounted_subtotal_cents),
            line_discounts=format_currency(line_discounts_cents),
            tier_discounts=format_currency(tier_discounts_cents),
            order_discount=format_currency(order_discount_cents),
            total_discounts=format_currency(total_discounts_cents),
            tax=format_currency(taxes.total_tax_cents),
            grand_total=format_currency(grand_total_cents),
        ),
        trace=tuple(trace),
    )


class PricingEngine:
    """
    Facade over the pricing functions with fixed overrides and defaults.

    The engine keeps only read-only configuration, so one instance can be
    shared between callers.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        tiers: Optional[Mapping[str, CustomerTier]] = None,
        tax_rates: Optional[Mapping[str, ProvinceTaxRule]] = None,
    ):
        self.settings = settings or get_settings()
        self.tiers = tiers
        self.tax_rates = tax_rates

    def calculate(self, order: OrderInput) -> OrderResult:
        """Calculate an order."""
        return calculate_order(order, self.tiers, self.tax_rates, self.settings)

    def calculate_payload(self, payload: dict) -> OrderResult:
        """Validate a plain order payload and calculate it."""
        return self.calculate(parse_order_payload(payload))

    def calculate_line(self, item: LineItemInput) -> LineItemResult:
        """Calculate a single line."""
        return calculate_line_item(item, self.tiers, self.settings)

    def calculate_taxes(self, amount_cents: int, province: Optional[str] = None, is_tax_exempt: bool = False) -> TaxResult:
        """Tax an amount for a province (settings default when omitted)."""
        return calculate_taxes(amount_cents, province or self.settings.default_province, is_tax_exempt, self.tax_rates)

    def add_tax(self, amount_cents: int, province: Optional[str] = None) -> TaxedAmount:
        return add_tax(amount_cents, province or self.settings.default_province, self.tax_rates)

    def extract_tax(self, total_cents: int, province: Optional[str] = None) -> TaxedAmount:
        return extract_tax(total_cents, province or self.settings.default_province, self.tax_rates)
