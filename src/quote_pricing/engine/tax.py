"""
Province Tax Calculator - Canadian sales tax on an amount in cents.

Three regimes, chosen by the province's rates:
- HST: one harmonized rate
- GST + PST: two independent rates on the same base
- GST + QST (Quebec): QST is charged on the amount plus GST

Unknown province codes are taxed as Ontario.
"""
import logging
from typing import Mapping, Optional

from .models import ProvinceTaxRule, TaxComponent, TaxedAmount, TaxResult
from .money import round_cents, validate_number
from .registries import DEFAULT_PROVINCE, TAX_RATES

logger = logging.getLogger(__name__)


def _normalize_province(province: Optional[str]) -> str:
    return str(province or DEFAULT_PROVINCE).strip().upper()


def get_tax_rule(province: Optional[str], tax_rates: Optional[Mapping[str, ProvinceTaxRule]] = None) -> ProvinceTaxRule:
    """
    Resolve the tax rule for a province code.

    Falls back to Ontario when the code is unknown.
    """
    rates = tax_rates if tax_rates is not None else TAX_RATES
    code = _normalize_province(province)
    rule = rates.get(code)
    if rule is None:
        logger.warning("Unknown province %r, falling back to %s tax rates", province, DEFAULT_PROVINCE)
        rule = rates.get(DEFAULT_PROVINCE, TAX_RATES[DEFAULT_PROVINCE])
    return rule


def list_tax_rates(tax_rates: Optional[Mapping[str, ProvinceTaxRule]] = None) -> tuple[ProvinceTaxRule, ...]:
    """All province tax rules, sorted by province code."""
    rates = tax_rates if tax_rates is not None else TAX_RATES
    return tuple(rates[code] for code in sorted(rates))


def _percent(rate: float) -> float:
    return round(rate * 100, 3)


def calculate_taxes(
    amount_cents: int,
    province: Optional[str] = DEFAULT_PROVINCE,
    is_tax_exempt: bool = False,
    tax_rates: Optional[Mapping[str, ProvinceTaxRule]] = None,
) -> TaxResult:
    """
    Calculate taxes for a taxable amount.

    Args:
        amount_cents: Taxable amount in cents
        province: Province or territory code
        is_tax_exempt: Whether the amount is exempt
        tax_rates: Optional tax table replacing the built-in one

    Returns:
        TaxResult with per-tax amounts and a breakdown
    """
    amount_cents = validate_number(amount_cents, 'Taxable amount', allow_negative=True)
    code = _normalize_province(province)
    rule = get_tax_rule(code, tax_rates)

    if is_tax_exempt or amount_cents <= 0:
        return TaxResult(
            province=code,
            tax_label='Tax Exempt' if is_tax_exempt else rule.label,
            taxable_amount_cents=0,
            is_tax_exempt=is_tax_exempt,
        )

    hst_cents = 0
    gst_cents = 0
    pst_cents = 0
    breakdown = []

    if rule.hst_rate > 0:
        hst_cents = round_cents(amount_cents * rule.hst_rate)
        breakdown.append(TaxComponent('HST', _percent(rule.hst_rate), hst_cents, f"HST {_percent(rule.hst_rate):g}%"))
    else:
        if rule.gst_rate > 0:
            gst_cents = round_cents(amount_cents * rule.gst_rate)
            breakdown.append(TaxComponent('GST', _percent(rule.gst_rate), gst_cents, f"GST {_percent(rule.gst_rate):g}%"))
        if rule.pst_rate > 0:
            if rule.compound_pst:
                # QST is charged on the GST-inclusive amount
                pst_cents = round_cents((amount_cents + gst_cents) * rule.pst_rate)
                breakdown.append(TaxComponent(
                    'QST', _percent(rule.pst_rate), pst_cents,
                    f"QST {_percent(rule.pst_rate):g}%", is_compound=True,
                ))
            else:
                pst_cents = round_cents(amount_cents * rule.pst_rate)
                breakdown.append(TaxComponent('PST', _percent(rule.pst_rate), pst_cents, f"PST {_percent(rule.pst_rate):g}%"))

    return TaxResult(
        province=code,
        tax_label=rule.label,
        taxable_amount_cents=amount_cents,
        hst_cents=hst_cents,
        gst_cents=gst_cents,
        pst_cents=pst_cents,
        total_tax_cents=hst_cents + gst_cents + pst_cents,
        is_tax_exempt=False,
        breakdown=tuple(breakdown),
    )


def calculate_tax(
    amount_cents: int,
    province: Optional[str] = DEFAULT_PROVINCE,
    tax_rates: Optional[Mapping[str, ProvinceTaxRule]] = None,
) -> int:
    """Quick tax calculation: total tax in cents for an amount."""
    return calculate_taxes(amount_cents, province, tax_rates=tax_rates).total_tax_cents


def add_tax(
    amount_cents: int,
    province: Optional[str] = DEFAULT_PROVINCE,
    tax_rates: Optional[Mapping[str, ProvinceTaxRule]] = None,
) -> TaxedAmount:
    """Add tax to a pre-tax amount."""
    amount_cents = validate_number(amount_cents, 'Amount', min_value=0)
    tax = calculate_tax(amount_cents, province, tax_rates)
    return TaxedAmount(
        amount_cents=amount_cents,
        tax_cents=tax,
        total_cents=amount_cents + tax,
        province=_normalize_province(province),
    )


def extract_tax(
    total_cents: int,
    province: Optional[str] = DEFAULT_PROVINCE,
    tax_rates: Optional[Mapping[str, ProvinceTaxRule]] = None,
) -> TaxedAmount:
    """
    Split a tax-inclusive total into its pre-tax amount and tax.

    The pre-tax amount is total / (1 + combined rate), rounded to cents;
    for Quebec the combined rate includes QST charged on GST.
    """
    total_cents = validate_number(total_cents, 'Total', min_value=0)
    rule = get_tax_rule(province, tax_rates)

    amount_cents = round_cents(total_cents / (1 + rule.combined_rate))
    return TaxedAmount(
        amount_cents=amount_cents,
        tax_cents=total_cents - amount_cents,
        total_cents=total_cents,
        province=_normalize_province(province),
    )
