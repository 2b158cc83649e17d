"""
Order aggregation: subtotals, order discounts, taxable apportionment,
tax, grand total and margin.
"""
import os
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from quote_pricing.config.settings import Settings
from quote_pricing.engine import (
    CustomerTier,
    InputValidationError,
    LineItemInput,
    OrderInput,
    PercentOffBreak,
    PricingEngine,
    calculate_order,
)


@pytest.fixture(scope="module")
def engine():
    return PricingEngine()


@pytest.fixture
def single_line_order():
    return OrderInput(
        items=(LineItemInput(unit_price_cents=10000, quantity=2, discount_percent=10),),
        province='ON',
    )


def test_single_line_order(engine, single_line_order):
    result = engine.calculate(single_line_order)
    line = result.lines[0]
    assert line.subtotal_cents == 20000
    assert line.line_discount_cents == 2000
    assert line.line_total_cents == 18000
    assert result.subtotal_cents == 18000
    assert result.taxes.total_tax_cents == 2340
    assert result.grand_total_cents == 20340
    assert result.formatted.grand_total == "$203.40"


def test_empty_order(engine):
    result = engine.calculate(OrderInput())
    assert result.item_count == 0
    assert result.total_quantity == 0
    assert result.subtotal_cents == 0
    assert result.grand_total_cents == 0
    assert result.taxes.total_tax_cents == 0
    assert result.margins.margin_percent == 0


def test_mixed_tax_exempt_lines(engine):
    result = engine.calculate(OrderInput(
        items=[
            LineItemInput(unit_price_cents=10000, quantity=1),
            LineItemInput(unit_price_cents=10000, quantity=1, is_tax_exempt=True),
        ],
        province='ON',
    ))
    assert result.taxes.taxable_amount_cents == 10000
    assert result.taxes.total_tax_cents == 1300
    assert result.grand_total_cents == 21300


def test_percentage_order_discount(engine):
    result = engine.calculate(OrderInput(
        items=[LineItemInput(unit_price_cents=10000, quantity=1)],
        order_discount_percent=10,
        province='ON',
    ))
    assert result.discounts.order_discount_cents == 1000
    assert result.discounted_subtotal_cents == 9000
    assert result.taxes.total_tax_cents == 1170
    assert result.grand_total_cents == 10170


def test_order_discount_capped_at_subtotal(engine):
    result = engine.calculate(OrderInput(
        items=[LineItemInput(unit_price_cents=10000, quantity=1)],
        order_discount_cents=50000,
    ))
    assert result.discounts.order_discount_cents == 10000
    assert result.discounted_subtotal_cents == 0
    assert result.taxes.total_tax_cents == 0
    assert result.grand_total_cents == 0


def test_order_discount_apportioned_between_taxable_and_exempt(engine):
    """60% of the subtotal is taxable, so 60% of the order discount comes off the tax base."""
    result = engine.calculate(OrderInput(
        items=[
            LineItemInput(unit_price_cents=6000, quantity=1),
            LineItemInput(unit_price_cents=4000, quantity=1, is_tax_exempt=True),
        ],
        order_discount_cents=1000,
        province='ON',
    ))
    assert result.discounted_subtotal_cents == 9000
    assert result.taxes.taxable_amount_cents == 5400
    assert result.taxes.total_tax_cents == 702
    assert result.grand_total_cents == 9702


def test_whole_order_tax_exempt(engine):
    result = engine.calculate(OrderInput(
        items=[LineItemInput(unit_price_cents=10000, quantity=3)],
        province='BC',
        is_tax_exempt=True,
    ))
    assert result.taxes.taxable_amount_cents == 0
    assert result.taxes.total_tax_cents == 0
    assert result.taxes.tax_label == 'Tax Exempt'
    assert all(line.is_tax_exempt for line in result.lines)
    assert result.grand_total_cents == 30000


def test_order_tier_applies_to_every_line(engine):
    result = engine.calculate(OrderInput(
        items=[
            LineItemInput(unit_price_cents=10000, quantity=1, customer_tier='vip'),
            LineItemInput(unit_price_cents=5000, quantity=2),
        ],
        customer_tier='dealer',
    ))
    assert [line.effective_unit_price_cents for line in result.lines] == [8000, 4000]
    assert result.discounts.tier_discounts_cents == 4000
    assert all(line.tier_label == 'Dealer' for line in result.lines)


def test_discount_breakdown(engine):
    result = engine.calculate(OrderInput(
        items=[LineItemInput(unit_price_cents=10000, quantity=2, discount_percent=10)],
        order_discount_percent=5,
        customer_tier='preferred',
        province='ON',
    ))
    assert result.subtotal_cents == 17100
    assert result.discounts.line_discounts_cents == 1900
    assert result.discounts.tier_discounts_cents == 1000
    assert result.discounts.order_discount_cents == 855
    assert result.discounts.order_discount_percent == 5
    assert result.discounts.total_discounts_cents == 3755
    assert result.discounted_subtotal_cents == 16245
    assert result.taxes.total_tax_cents == 2112
    assert result.grand_total_cents == 18357
    assert result.formatted.total_discounts == "$37.55"


def test_order_margin(engine):
    result = engine.calculate(OrderInput(
        items=[LineItemInput(unit_price_cents=10000, quantity=1, cost_cents=6000)],
        order_discount_percent=10,
    ))
    assert result.margins.total_cost_cents == 6000
    assert result.margins.total_margin_cents == 3000
    assert result.margins.margin_percent == 33.33


def test_counts(engine):
    result = engine.calculate(OrderInput(items=[
        LineItemInput(unit_price_cents=100, quantity=3),
        LineItemInput(unit_price_cents=100, quantity=0),
        LineItemInput(unit_price_cents=100, quantity=2),
    ]))
    assert result.item_count == 3
    assert result.total_quantity == 5
    assert result.subtotal_cents == 500


def test_line_error_reports_line_number(engine):
    order = OrderInput(items=[
        LineItemInput(unit_price_cents=1000, quantity=1),
        LineItemInput(unit_price_cents=-1000, quantity=1),
    ])
    with pytest.raises(InputValidationError, match=r"^Line item 2: Unit price") as exc:
        engine.calculate(order)
    assert exc.value.line_index == 2
    assert exc.value.field == 'Unit price'


@pytest.mark.parametrize("kwargs", [
    {"order_discount_percent": 150},
    {"order_discount_percent": -1},
    {"order_discount_cents": -100},
])
def test_invalid_order_discount(engine, kwargs):
    with pytest.raises(InputValidationError):
        engine.calculate(OrderInput(items=[LineItemInput(unit_price_cents=100, quantity=1)], **kwargs))


def test_fractional_order_discount_cents_rejected(engine):
    order = OrderInput(items=[LineItemInput(unit_price_cents=1000, quantity=1)], order_discount_cents=0.5)
    with pytest.raises(InputValidationError) as exc:
        engine.calculate(order)
    assert exc.value.field == 'Order discount amount'
    assert exc.value.constraint == 'not_an_integer'


def test_plain_dict_volume_break_reports_line_number(engine):
    order = OrderInput(items=[
        LineItemInput(unit_price_cents=1000, quantity=3, volume_breaks=({"minQty": 2, "discountPercent": 5},)),
    ])
    with pytest.raises(InputValidationError, match=r"^Line item 1: Volume break") as exc:
        engine.calculate(order)
    assert exc.value.line_index == 1
    assert exc.value.constraint == 'invalid_type'


def test_subtotal_invariants(engine):
    orders = [
        OrderInput(
            items=[
                LineItemInput(unit_price_cents=1999, quantity=3, discount_percent=7.5),
                LineItemInput(unit_price_cents=4550, quantity=1, discount_amount_cents=300, is_tax_exempt=True),
                LineItemInput(unit_price_cents=899, quantity=12, volume_breaks=(PercentOffBreak(10, 12),)),
            ],
            order_discount_percent=pct,
            order_discount_cents=fixed,
            customer_tier=tier,
            province=province,
        )
        for pct, fixed, tier, province in [
            (0, 0, 'retail', 'ON'),
            (12.5, 250, 'wholesale', 'QC'),
            (3, 99999, 'vip', 'BC'),
        ]
    ]
    for order in orders:
        result = engine.calculate(order)
        assert sum(line.line_total_cents for line in result.lines) == result.subtotal_cents
        assert result.subtotal_cents - result.discounts.order_discount_cents == result.discounted_subtotal_cents
        assert result.discounts.order_discount_cents <= result.subtotal_cents
        assert result.grand_total_cents == result.discounted_subtotal_cents + result.taxes.total_tax_cents


def test_repeated_calls_are_identical(engine, single_line_order):
    first = engine.calculate(single_line_order)
    second = engine.calculate(single_line_order)
    assert first == second
    assert first.to_dict() == second.to_dict()


def test_to_dict(engine, single_line_order):
    data = engine.calculate(single_line_order).to_dict()
    assert data['grand_total_cents'] == 20340
    assert data['lines'][0]['line_total_cents'] == 18000
    assert data['taxes']['breakdown'][0]['tax_type'] == 'HST'
    assert 'trace' not in data
    assert 'trace' not in data['lines'][0]


def test_trace(engine, single_line_order):
    text = engine.calculate(single_line_order).get_trace_text()
    assert "Grand Total" in text
    assert "$203.40" in text


def test_default_province_from_settings():
    order = OrderInput(items=[LineItemInput(unit_price_cents=10000, quantity=1)])
    assert calculate_order(order).taxes.total_tax_cents == 1300
    bc_engine = PricingEngine(settings=Settings(default_province='BC'))
    assert bc_engine.calculate(order).taxes.total_tax_cents == 1200
    assert bc_engine.add_tax(10000).total_cents == 11200


def test_engine_tier_override():
    staff = PricingEngine(tiers={'retail': CustomerTier('retail', 10, 'Staff')})
    result = staff.calculate(OrderInput(items=[LineItemInput(unit_price_cents=10000, quantity=1)]))
    assert result.lines[0].effective_unit_price_cents == 9000
    assert result.lines[0].tier_label == 'Staff'
