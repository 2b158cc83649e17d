"""
Payload schemas - plain caller data to engine inputs.

The order manager hands the engine plain dicts built from its own records.
These models accept snake_case or camelCase keys and money either as
integer cents (``unit_price_cents``) or as dollars (``unit_price``).
Dollars are converted to cents here, once; everything past this point is
integer cents. Scalars are strict: a quoted number, or a boolean standing
in for a quantity, is rejected rather than coerced. Range checks (negative
prices, percents over 100) are left to the engine's own validation.
"""
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    ValidationError,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .errors import InputValidationError
from .models import FixedPriceBreak, LineItemInput, OrderInput, PercentOffBreak, VolumeBreak
from .money import dollars_to_cents


def _cents(cents: Optional[int], dollars: Optional[float]) -> int:
    if cents is not None:
        return cents
    if dollars is not None:
        return dollars_to_cents(dollars)
    return 0


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='ignore')


class VolumeBreakPayload(_Payload):
    """A volume break: either a fixed price or a percent off."""
    min_qty: StrictInt = Field(ge=1)
    price_cents: Optional[StrictInt] = None
    price: Optional[StrictFloat] = None
    discount_percent: Optional[StrictFloat] = None

    @model_validator(mode='after')
    def check_single_effect(self) -> 'VolumeBreakPayload':
        has_price = self.price_cents is not None or self.price is not None
        has_percent = self.discount_percent is not None
        if has_price == has_percent:
            raise ValueError("volume break needs exactly one of a price or a discount percent")
        return self

    def to_break(self) -> VolumeBreak:
        if self.discount_percent is not None:
            return PercentOffBreak(min_qty=self.min_qty, discount_percent=self.discount_percent)
        return FixedPriceBreak(min_qty=self.min_qty, price_cents=_cents(self.price_cents, self.price))


class LineItemPayload(_Payload):
    """A cart line as sent by the order manager."""
    unit_price_cents: Optional[StrictInt] = None
    unit_price: Optional[StrictFloat] = None
    quantity: StrictInt = 0
    discount_percent: StrictFloat = 0
    discount_amount_cents: Optional[StrictInt] = None
    discount_amount: Optional[StrictFloat] = None
    cost_cents: Optional[StrictInt] = None
    cost: Optional[StrictFloat] = None
    volume_breaks: list[VolumeBreakPayload] = Field(default_factory=list)
    customer_tier: Optional[str] = None
    is_tax_exempt: StrictBool = False
    sku: Optional[str] = None
    description: Optional[str] = None

    def to_input(self) -> LineItemInput:
        return LineItemInput(
            unit_price_cents=_cents(self.unit_price_cents, self.unit_price),
            quantity=self.quantity,
            discount_percent=self.discount_percent,
            discount_amount_cents=_cents(self.discount_amount_cents, self.discount_amount),
            cost_cents=_cents(self.cost_cents, self.cost),
            volume_breaks=tuple(b.to_break() for b in self.volume_breaks),
            customer_tier=self.customer_tier or 'retail',
            is_tax_exempt=self.is_tax_exempt,
            sku=self.sku,
            description=self.description,
        )


class OrderPayload(_Payload):
    """A whole cart as sent by the order manager."""
    items: list[LineItemPayload] = Field(default_factory=list)
    order_discount_percent: StrictFloat = 0
    order_discount_cents: Optional[StrictInt] = None
    order_discount_amount: Optional[StrictFloat] = None
    province: Optional[str] = None
    customer_tier: Optional[str] = None
    is_tax_exempt: StrictBool = False

    def to_input(self) -> OrderInput:
        return OrderInput(
            items=tuple(item.to_input() for item in self.items),
            order_discount_percent=self.order_discount_percent,
            order_discount_cents=_cents(self.order_discount_cents, self.order_discount_amount),
            province=self.province,
            customer_tier=self.customer_tier,
            is_tax_exempt=self.is_tax_exempt,
        )


def _to_input_error(e: ValidationError) -> InputValidationError:
    first = e.errors()[0]
    location = ".".join(str(part) for part in first['loc']) or "payload"
    return InputValidationError(
        f"{location}: {first['msg']}",
        field=location,
        constraint=first['type'],
    )


def parse_line_payload(payload: dict) -> LineItemInput:
    """Validate a plain line dict and convert it to a LineItemInput."""
    try:
        return LineItemPayload.model_validate(payload).to_input()
    except ValidationError as e:
        raise _to_input_error(e) from e


def parse_order_payload(payload: dict) -> OrderInput:
    """Validate a plain order dict and convert it to an OrderInput."""
    try:
        return OrderPayload.model_validate(payload).to_input()
    except ValidationError as e:
        raise _to_input_error(e) from e
