"""Checkout pricing rules.

Everything here is pure: no store access, no clock. Money is ``Decimal`` dollars and every
rounding step goes to whole cents with half-up semantics.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from services.api.app.services.checkout_base import (
    CartLine,
    Deal,
    InsufficientStockError,
    ProductSnapshot,
    StockValidation,
)
from services.api.app.services.checkout_settings import (
    DEFAULT_FREE_SHIPPING_THRESHOLD,
    DEFAULT_SHIPPING_RATE,
    DEFAULT_TAX_RATE,
)

CENT = Decimal("0.01")
_HUNDRED = Decimal("100")

Money = Decimal | int | float | str


def to_decimal(value: Money) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps 5.99 as 5.99 instead of its binary float expansion.
    return Decimal(str(value))


def round_money(value: Money) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def charge_amount_cents(total_amount: Money) -> int:
    """Amount in minor units that a payment intent should be created for."""
    return int((to_decimal(total_amount) * _HUNDRED).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def resolve_active_deal(deals: Iterable[Deal] | None, now: datetime) -> Deal | None:
    """Return the first deal whose window contains ``now`` (both ends inclusive)."""
    for deal in deals or ():
        if deal.is_active(now):
            return deal
    return None


@dataclass(frozen=True, slots=True)
class PriceBreakdown:
    effective_price: Decimal
    savings: Decimal


def effective_price(
    base_price: Money,
    discounted_price: Money,
    active_deal: Deal | None,
) -> PriceBreakdown:
    # No clamping: discount_percent in [0, 100] and discounted <= base are enforced upstream.
    base = to_decimal(base_price)
    if active_deal is not None:
        price = base - base * to_decimal(active_deal.discount_percent) / _HUNDRED
    else:
        price = to_decimal(discounted_price)

    return PriceBreakdown(effective_price=price, savings=base - price)


def line_total(unit_price: Money, quantity: int) -> Decimal:
    return round_money(to_decimal(unit_price) * quantity)


def check_stock(requested: int, available: int, item_label: str) -> None:
    if requested > available:
        raise InsufficientStockError(item_label, available=available, requested=requested)


def validate_stock_availability(
    lines: Iterable[CartLine],
    get_product: Callable[[str], ProductSnapshot | None],
) -> StockValidation:
    """Check every line and collect all problems instead of stopping at the first one."""
    errors: list[str] = []

    for line in lines:
        product = get_product(line.product_id)
        if product is None:
            errors.append(f"Product not found: {line.product_id}")
            continue

        try:
            check_stock(line.quantity, product.stock, product.name)
        except InsufficientStockError as e:
            errors.append(str(e))

    return StockValidation(is_valid=not errors, errors=errors)


@dataclass(frozen=True, slots=True)
class OrderSummary:
    subtotal: Decimal
    tax_amount: Decimal
    shipping_cost: Decimal
    discount_amount: Decimal
    total_amount: Decimal

    @property
    def free_shipping_eligible(self) -> bool:
        return self.shipping_cost == 0


def calculate_order_summary(
    subtotal: Money,
    tax_rate: Money = DEFAULT_TAX_RATE,
    free_shipping_threshold: Money = DEFAULT_FREE_SHIPPING_THRESHOLD,
    shipping_rate: Money = DEFAULT_SHIPPING_RATE,
    discount_amount: Money = 0,
) -> OrderSummary:
    """Turn a subtotal into tax, shipping and a grand total.

    Each component is rounded to cents on its own, the total is summed from the rounded
    components and rounded once more, so the displayed parts always add up to the total.
    """

    rounded_subtotal = round_money(subtotal)
    tax = round_money(rounded_subtotal * to_decimal(tax_rate))
    if rounded_subtotal >= to_decimal(free_shipping_threshold):
        shipping = round_money(0)
    else:
        shipping = round_money(shipping_rate)
    discount = round_money(discount_amount)

    return OrderSummary(
        subtotal=rounded_subtotal,
        tax_amount=tax,
        shipping_cost=shipping,
        discount_amount=discount,
        total_amount=round_money(rounded_subtotal + tax + shipping - discount),
    )
