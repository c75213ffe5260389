from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from services.api.app.services.checkout_base import (
    Address,
    BuyerProfile,
    Cart,
    CartLine,
    CheckoutStore,
    Clock,
    Deal,
    EmptyCartError,
    PaymentMethod,
    ProductNotFoundError,
    ProductSnapshot,
    StockValidation,
)
from services.api.app.services.checkout_settings import CheckoutSettings
from services.api.app.services.pricing import (
    OrderSummary,
    calculate_order_summary,
    check_stock,
    effective_price,
    line_total,
    resolve_active_deal,
    validate_stock_availability,
)

logger = logging.getLogger(__name__)


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True, slots=True)
class ResolvedLine:
    line: CartLine
    product: ProductSnapshot
    active_deal: Deal | None
    effective_price: Decimal
    savings_per_unit: Decimal
    line_total: Decimal


@dataclass(frozen=True, slots=True)
class CheckoutSummary:
    cart: Cart
    lines: list[ResolvedLine]
    order_summary: OrderSummary
    free_shipping_threshold: Decimal
    addresses: list[Address]
    payment_methods: list[PaymentMethod]
    user: BuyerProfile | None

    @property
    def item_count(self) -> int:
        return len(self.lines)


def _load_cart(store: CheckoutStore, user_id: str) -> Cart:
    cart = store.get_cart_with_lines(user_id)
    if cart is None or not cart.lines:
        raise EmptyCartError()
    return cart


def _load_product(store: CheckoutStore, line: CartLine) -> ProductSnapshot:
    product = store.get_product_snapshot(line.product_id)
    if product is None:
        raise ProductNotFoundError(line.product_id)
    return product


def resolve_line(line: CartLine, product: ProductSnapshot, now: datetime) -> ResolvedLine:
    """Price one cart line. Raises InsufficientStockError when the line cannot be filled."""
    deal = resolve_active_deal(product.deals, now)
    check_stock(line.quantity, product.stock, product.name)

    price = effective_price(product.base_price, product.discounted_price, deal)
    return ResolvedLine(
        line=line,
        product=product,
        active_deal=deal,
        effective_price=price.effective_price,
        savings_per_unit=price.savings,
        line_total=line_total(price.effective_price, line.quantity),
    )


def assemble_checkout_summary(
    user_id: str,
    store: CheckoutStore,
    clock: Clock,
    settings: CheckoutSettings | None = None,
) -> CheckoutSummary:
    """Build the read-only checkout snapshot for one buyer.

    Lines are processed in cart order and the first line that cannot be filled aborts the
    whole summary. Nothing is written.
    """

    settings = settings or CheckoutSettings()
    cart = _load_cart(store, user_id)
    now = clock.now()

    lines: list[ResolvedLine] = []
    subtotal = Decimal("0")
    for line in cart.lines:
        resolved = resolve_line(line, _load_product(store, line), now)
        subtotal += resolved.line_total
        lines.append(resolved)

    order_summary = calculate_order_summary(
        subtotal,
        tax_rate=settings.tax_rate,
        free_shipping_threshold=settings.free_shipping_threshold,
        shipping_rate=settings.shipping_rate,
        discount_amount=settings.discount_amount,
    )

    summary = CheckoutSummary(
        cart=cart,
        lines=lines,
        order_summary=order_summary,
        free_shipping_threshold=settings.free_shipping_threshold,
        addresses=store.list_addresses(user_id),
        payment_methods=store.list_payment_methods(user_id),
        user=store.get_buyer_profile(user_id),
    )

    logger.info(
        "Checkout summary built user_id=%s lines=%d total=%s",
        user_id,
        summary.item_count,
        order_summary.total_amount,
    )
    return summary


def validate_cart_stock(user_id: str, store: CheckoutStore) -> StockValidation:
    """Report every stock problem in the buyer's cart at once."""
    cart = _load_cart(store, user_id)
    return validate_stock_availability(cart.lines, store.get_product_snapshot)
