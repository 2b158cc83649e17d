"""
Data models for the pricing engine.

Uses frozen dataclasses so every input and result is an immutable value.
All money fields are integer cents.
"""
from dataclasses import dataclass, field, asdict
from typing import Optional, Union


@dataclass(frozen=True)
class TraceStep:
    """A single step in the pricing calculation trace."""
    step: str
    description: str
    value: Optional[str] = None


def _trace_text(trace: tuple, bullet: str) -> str:
    lines = []
    for t in trace:
        if t.value:
            lines.append(f"{bullet} {t.step}: {t.description} = {t.value}")
        else:
            lines.append(f"{bullet} {t.step}: {t.description}")
    return "\n".join(lines)


# Volume breaks

@dataclass(frozen=True)
class FixedPriceBreak:
    """From min_qty units on, the unit price is price_cents."""
    min_qty: int
    price_cents: int


@dataclass(frozen=True)
class PercentOffBreak:
    """From min_qty units on, the base unit price is reduced by discount_percent."""
    min_qty: int
    discount_percent: float


VolumeBreak = Union[FixedPriceBreak, PercentOffBreak]


@dataclass(frozen=True)
class AppliedBreak:
    """The volume break that won for a line."""
    rule: VolumeBreak
    kind: str  # "fixed_price" or "percentage"

    @property
    def min_qty(self) -> int:
        return self.rule.min_qty


@dataclass(frozen=True)
class VolumeBreakResult:
    price_cents: int
    applied_break: Optional[AppliedBreak] = None


# Registries

@dataclass(frozen=True)
class CustomerTier:
    """A named customer discount class."""
    key: str
    discount_percent: float
    label: str


@dataclass(frozen=True)
class TierResult:
    price_cents: int
    tier_discount_cents: int
    tier_discount_percent: float
    tier_label: str


@dataclass(frozen=True)
class ProvinceTaxRule:
    """Sales tax rates for one province or territory."""
    code: str
    hst_rate: float
    gst_rate: float
    pst_rate: float
    label: str
    compound_pst: bool = False  # PST charged on amount + GST (Quebec QST)

    @property
    def regime(self) -> str:
        """One of "hst", "gst_pst" or "gst_qst_compound"."""
        if self.hst_rate > 0:
            return "hst"
        if self.compound_pst:
            return "gst_qst_compound"
        return "gst_pst"

    @property
    def combined_rate(self) -> float:
        """Effective tax rate on the pre-tax amount."""
        if self.hst_rate > 0:
            return self.hst_rate
        if self.compound_pst:
            return self.gst_rate + (1 + self.gst_rate) * self.pst_rate
        return self.gst_rate + self.pst_rate


# Tax results

@dataclass(frozen=True)
class TaxComponent:
    """One tax line (HST, GST, PST or QST) of a tax calculation."""
    tax_type: str
    rate_percent: float
    amount_cents: int
    label: str
    is_compound: bool = False


@dataclass(frozen=True)
class TaxResult:
    """Tax breakdown for a taxable amount."""
    province: str
    tax_label: str
    taxable_amount_cents: int
    hst_cents: int = 0
    gst_cents: int = 0
    pst_cents: int = 0
    total_tax_cents: int = 0
    is_tax_exempt: bool = False
    breakdown: tuple[TaxComponent, ...] = ()


@dataclass(frozen=True)
class TaxedAmount:
    """A pre-tax amount, its tax and the tax-inclusive total."""
    amount_cents: int
    tax_cents: int
    total_cents: int
    province: str


# Line items

@dataclass(frozen=True)
class LineItemInput:
    """A single cart line to be priced."""
    unit_price_cents: int = 0
    quantity: int = 0
    discount_percent: float = 0
    discount_amount_cents: int = 0
    cost_cents: int = 0
    volume_breaks: tuple[VolumeBreak, ...] = ()
    customer_tier: str = 'retail'
    is_tax_exempt: bool = False

    # Pass-through identifiers for the caller
    sku: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.volume_breaks, tuple):
            object.__setattr__(self, 'volume_breaks', tuple(self.volume_breaks or ()))


@dataclass(frozen=True)
class LineItemResult:
    """Every intermediate and final amount for one priced line."""
    unit_price_cents: int  # after volume break
    original_unit_price_cents: int
    effective_unit_price_cents: int  # after volume break and tier discount
    quantity: int
    subtotal_cents: int
    line_discount_cents: int
    tier_discount_cents: int
    total_discount_cents: int
    line_total_cents: int
    cost_cents: int  # total cost for the line
    margin_cents: int
    margin_percent: float
    is_tax_exempt: bool
    tier_label: str
    volume_break_applied: Optional[AppliedBreak] = None
    sku: Optional[str] = None
    description: Optional[str] = None
    trace: tuple[TraceStep, ...] = ()

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        return _trace_text(self.trace, "→")


# Orders

@dataclass(frozen=True)
class OrderInput:
    """A cart to be priced as a whole."""
    items: tuple[LineItemInput, ...] = ()
    order_discount_percent: float = 0
    order_discount_cents: int = 0
    province: Optional[str] = None  # None means the settings default
    customer_tier: Optional[str] = None
    is_tax_exempt: bool = False

    def __post_init__(self):
        if not isinstance(self.items, tuple):
            object.__setattr__(self, 'items', tuple(self.items or ()))


@dataclass(frozen=True)
class DiscountBreakdown:
    line_discounts_cents: int
    tier_discounts_cents: int
    order_discount_cents: int
    order_discount_percent: float
    total_discounts_cents: int


@dataclass(frozen=True)
class MarginBreakdown:
    total_cost_cents: int
    total_margin_cents: int
    margin_percent: float


@dataclass(frozen=True)
class FormattedTotals:
    """Display strings for the order totals."""
    subtotal: str
    discounted_subtotal: str
    line_discounts: str
    tier_discounts: str
    order_discount: str
    total_discounts: str
    tax: str
    grand_total: str


@dataclass(frozen=True)
class OrderResult:
    """Complete result of an order calculation."""
    lines: tuple[LineItemResult, ...]
    item_count: int
    total_quantity: int
    subtotal_cents: int
    discounted_subtotal_cents: int
    discounts: DiscountBreakdown
    taxes: TaxResult
    grand_total_cents: int
    margins: MarginBreakdown
    formatted: FormattedTotals
    trace: tuple[TraceStep, ...] = field(default=())

    def get_trace_text(self) -> str:
        """Get human-readable order trace as formatted text."""
        return _trace_text(self.trace, "•")

    def to_dict(self) -> dict:
        """Convert to a plain nested dict for persistence."""
        data = asdict(self)
        data.pop('trace')
        for line in data['lines']:
            line.pop('trace')
        return data
