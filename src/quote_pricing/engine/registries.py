"""
Built-in customer tier and province tax tables.

Both tables are read-only mappings. Callers that need different values pass
their own mapping to the engine instead of editing these.
"""
from types import MappingProxyType
from typing import Mapping

from .models import CustomerTier, ProvinceTaxRule


DEFAULT_PROVINCE = 'ON'
DEFAULT_TIER = 'retail'

CUSTOMER_TIERS: Mapping[str, CustomerTier] = MappingProxyType({
    'retail': CustomerTier('retail', 0, 'Retail'),
    'preferred': CustomerTier('preferred', 5, 'Preferred Customer'),
    'wholesale': CustomerTier('wholesale', 15, 'Wholesale'),
    'dealer': CustomerTier('dealer', 20, 'Dealer'),
    'vip': CustomerTier('vip', 25, 'VIP'),
})

TAX_RATES: Mapping[str, ProvinceTaxRule] = MappingProxyType({
    # HST provinces
    'ON': ProvinceTaxRule('ON', 0.13, 0, 0, 'HST 13%'),
    'NB': ProvinceTaxRule('NB', 0.15, 0, 0, 'HST 15%'),
    'NL': ProvinceTaxRule('NL', 0.15, 0, 0, 'HST 15%'),
    'NS': ProvinceTaxRule('NS', 0.15, 0, 0, 'HST 15%'),
    'PE': ProvinceTaxRule('PE', 0.15, 0, 0, 'HST 15%'),

    # GST + PST provinces
    'BC': ProvinceTaxRule('BC', 0, 0.05, 0.07, 'GST 5% + PST 7%'),
    'MB': ProvinceTaxRule('MB', 0, 0.05, 0.07, 'GST 5% + PST 7%'),
    'SK': ProvinceTaxRule('SK', 0, 0.05, 0.06, 'GST 5% + PST 6%'),
    'QC': ProvinceTaxRule('QC', 0, 0.05, 0.09975, 'GST 5% + QST 9.975%', compound_pst=True),

    # GST only
    'AB': ProvinceTaxRule('AB', 0, 0.05, 0, 'GST 5%'),
    'NT': ProvinceTaxRule('NT', 0, 0.05, 0, 'GST 5%'),
    'NU': ProvinceTaxRule('NU', 0, 0.05, 0, 'GST 5%'),
    'YT': ProvinceTaxRule('YT', 0, 0.05, 0, 'GST 5%'),
})
