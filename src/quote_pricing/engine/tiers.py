"""
Customer Tier Discount Applier.
"""
import logging
from typing import Mapping, Optional

from .models import CustomerTier, TierResult
from .money import round_cents
from .registries import CUSTOMER_TIERS, DEFAULT_TIER

logger = logging.getLogger(__name__)

_FALLBACK_TIER = CustomerTier(DEFAULT_TIER, 0, 'Retail')


def resolve_tier(customer_tier: Optional[str], tiers: Optional[Mapping[str, CustomerTier]] = None) -> CustomerTier:
    """
    Look up a tier by key.

    Unknown keys resolve to the retail tier of the same mapping.
    """
    tiers = tiers if tiers is not None else CUSTOMER_TIERS
    tier = tiers.get(customer_tier) if customer_tier else None
    if tier is None:
        if customer_tier and customer_tier != DEFAULT_TIER:
            logger.debug("Unknown customer tier %r, using retail", customer_tier)
        tier = tiers.get(DEFAULT_TIER, _FALLBACK_TIER)
    return tier


def apply_customer_tier(
    price_cents: int,
    customer_tier: Optional[str],
    tiers: Optional[Mapping[str, CustomerTier]] = None,
) -> TierResult:
    """Apply the tier's percentage discount to a unit price."""
    tier = resolve_tier(customer_tier, tiers)
    discount = round_cents(price_cents * (tier.discount_percent / 100))
    return TierResult(
        price_cents=price_cents - discount,
        tier_discount_cents=discount,
        tier_discount_percent=tier.discount_percent,
        tier_label=tier.label,
    )
