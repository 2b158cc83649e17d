"""Engine subpackage - pricing, tax and margin calculations."""
from .errors import PricingError, InputValidationError, ComputationBoundaryError
from .line_items import calculate_line_item, calculate_item_price
from .margins import calculate_price_for_margin, calculate_margin, calculate_markup
from .models import (
    FixedPriceBreak,
    PercentOffBreak,
    CustomerTier,
    ProvinceTaxRule,
    LineItemInput,
    LineItemResult,
    OrderInput,
    OrderResult,
    TaxResult,
    TaxedAmount,
)
from .money import round_cents, dollars_to_cents, cents_to_dollars, format_currency, validate_number
from .pricing_engine import PricingEngine, calculate_order
from .registries import CUSTOMER_TIERS, TAX_RATES, DEFAULT_PROVINCE
from .schemas import parse_order_payload, parse_line_payload
from .tax import calculate_taxes, calculate_tax, add_tax, extract_tax, list_tax_rates
from .tiers import apply_customer_tier
from .volume_breaks import apply_volume_breaks

__all__ = [
    'PricingEngine', 'calculate_order', 'calculate_line_item', 'calculate_item_price',
    'calculate_taxes', 'calculate_tax', 'add_tax', 'extract_tax', 'list_tax_rates',
    'calculate_price_for_margin', 'calculate_margin', 'calculate_markup',
    'apply_volume_breaks', 'apply_customer_tier',
    'round_cents', 'dollars_to_cents', 'cents_to_dollars', 'format_currency', 'validate_number',
    'parse_order_payload', 'parse_line_payload',
    'FixedPriceBreak', 'PercentOffBreak', 'CustomerTier', 'ProvinceTaxRule',
    'LineItemInput', 'LineItemResult', 'OrderInput', 'OrderResult', 'TaxResult', 'TaxedAmount',
    'CUSTOMER_TIERS', 'TAX_RATES', 'DEFAULT_PROVINCE',
    'PricingError', 'InputValidationError', 'ComputationBoundaryError',
]
