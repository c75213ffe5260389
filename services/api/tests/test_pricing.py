from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from services.api.app.services.checkout_base import (
    CartLine,
    Deal,
    InsufficientStockError,
    ProductSnapshot,
)
from services.api.app.services.pricing import (
    calculate_order_summary,
    charge_amount_cents,
    check_stock,
    effective_price,
    line_total,
    resolve_active_deal,
    round_money,
    validate_stock_availability,
)

NOW = datetime(2026, 3, 14, 12, 0, 0)


def _deal(deal_id: str, pct: str, start: datetime, end: datetime) -> Deal:
    return Deal(
        id=deal_id,
        name=f"Deal {deal_id}",
        discount_percent=Decimal(pct),
        start_time=start,
        end_time=end,
    )


# Deal resolution


def test_resolve_active_deal_returns_none_without_deals() -> None:
    assert resolve_active_deal([], NOW) is None
    assert resolve_active_deal(None, NOW) is None


def test_resolve_active_deal_window_is_inclusive_on_both_ends() -> None:
    starts_now = _deal("a", "10", NOW, NOW + timedelta(days=1))
    ends_now = _deal("b", "10", NOW - timedelta(days=1), NOW)

    assert resolve_active_deal([starts_now], NOW) == starts_now
    assert resolve_active_deal([ends_now], NOW) == ends_now


def test_resolve_active_deal_skips_expired_and_future_deals() -> None:
    expired = _deal("old", "50", NOW - timedelta(days=2), NOW - timedelta(microseconds=1))
    future = _deal("new", "50", NOW + timedelta(microseconds=1), NOW + timedelta(days=2))

    assert resolve_active_deal([expired, future], NOW) is None


def test_resolve_active_deal_takes_first_match_in_order() -> None:
    small = _deal("small", "5", NOW - timedelta(hours=1), NOW + timedelta(hours=1))
    big = _deal("big", "40", NOW - timedelta(hours=1), NOW + timedelta(hours=1))

    assert resolve_active_deal([small, big], NOW) == small
    assert resolve_active_deal((big, small), NOW) == big


# Effective price


def test_effective_price_without_deal_uses_discounted_price() -> None:
    result = effective_price(Decimal("100"), Decimal("90"), None)

    assert result.effective_price == Decimal("90")
    assert result.savings == Decimal("10")


def test_effective_price_with_deal_discounts_base_price() -> None:
    deal = _deal("d", "20", NOW, NOW + timedelta(days=1))
    result = effective_price(Decimal("100"), Decimal("90"), deal)

    assert result.effective_price == Decimal("80")
    assert result.savings == Decimal("20")


def test_effective_price_keeps_fractional_cents() -> None:
    deal = _deal("d", "15", NOW, NOW + timedelta(days=1))
    result = effective_price(Decimal("19.99"), Decimal("19.99"), deal)

    assert result.effective_price == Decimal("16.9915")
    assert line_total(result.effective_price, 3) == Decimal("50.97")


def test_full_discount_deal_gives_zero_price() -> None:
    deal = _deal("free", "100", NOW, NOW + timedelta(days=1))
    result = effective_price(Decimal("25"), Decimal("20"), deal)

    assert result.effective_price == 0
    assert result.savings == Decimal("25")


# Stock


def test_check_stock_allows_exact_quantity() -> None:
    check_stock(requested=5, available=5, item_label="Mug")


def test_check_stock_rejects_shortfall() -> None:
    with pytest.raises(InsufficientStockError) as exc_info:
        check_stock(requested=3, available=1, item_label="Mug")

    err = exc_info.value
    assert (err.item_label, err.available, err.requested) == ("Mug", 1, 3)
    assert str(err) == "Insufficient stock for Mug. Available: 1, Requested: 3"


def test_validate_stock_availability_collects_every_problem() -> None:
    products = {
        "p-1": ProductSnapshot(
            id="p-1",
            name="Mug",
            slug="mug",
            base_price=Decimal("15"),
            discounted_price=Decimal("12"),
            stock=1,
        ),
        "p-2": ProductSnapshot(
            id="p-2",
            name="Lamp",
            slug="lamp",
            base_price=Decimal("40"),
            discounted_price=Decimal("40"),
            stock=10,
        ),
    }
    lines = [
        CartLine(id="l-1", product_id="p-1", quantity=2),
        CartLine(id="l-2", product_id="p-2", quantity=2),
        CartLine(id="l-3", product_id="gone", quantity=1),
    ]

    result = validate_stock_availability(lines, products.get)

    assert result.is_valid is False
    assert result.errors == [
        "Insufficient stock for Mug. Available: 1, Requested: 2",
        "Product not found: gone",
    ]


def test_validate_stock_availability_passes_when_all_lines_fit() -> None:
    product = ProductSnapshot(
        id="p-1",
        name="Mug",
        slug="mug",
        base_price=Decimal("15"),
        discounted_price=Decimal("12"),
        stock=3,
    )
    result = validate_stock_availability([CartLine("l-1", "p-1", 3)], {"p-1": product}.get)

    assert result.is_valid is True
    assert result.errors == []


# Order summary


def test_order_summary_below_threshold_charges_shipping() -> None:
    summary = calculate_order_summary(40)

    assert summary.shipping_cost == Decimal("5.99")
    assert summary.tax_amount == Decimal("3.20")
    assert summary.total_amount == Decimal("49.19")
    assert summary.free_shipping_eligible is False


def test_order_summary_at_threshold_ships_free() -> None:
    summary = calculate_order_summary(50)

    assert summary.shipping_cost == 0
    assert summary.total_amount == Decimal("54.00")
    assert summary.free_shipping_eligible is True


def test_order_summary_tax_and_total() -> None:
    summary = calculate_order_summary(subtotal=100, tax_rate=0.08)

    assert summary.subtotal == Decimal("100.00")
    assert summary.tax_amount == Decimal("8.00")
    assert summary.shipping_cost == Decimal("0.00")
    assert summary.discount_amount == Decimal("0.00")
    assert summary.total_amount == Decimal("108.00")


def test_order_summary_subtracts_discount() -> None:
    summary = calculate_order_summary(100, discount_amount=10)

    assert summary.discount_amount == Decimal("10.00")
    assert summary.total_amount == Decimal("98.00")


def test_order_summary_total_is_sum_of_rounded_components() -> None:
    summary = calculate_order_summary(Decimal("10.005"))

    assert summary.subtotal == Decimal("10.01")
    assert summary.tax_amount == Decimal("0.80")
    assert summary.total_amount == Decimal("16.80")
    assert summary.total_amount == (
        summary.subtotal + summary.tax_amount + summary.shipping_cost - summary.discount_amount
    )


def test_order_summary_custom_config() -> None:
    summary = calculate_order_summary(
        30, tax_rate="0.10", free_shipping_threshold=25, shipping_rate="7.50"
    )

    assert summary.tax_amount == Decimal("3.00")
    assert summary.shipping_cost == 0
    assert summary.total_amount == Decimal("33.00")


# Money helpers


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (2.675, Decimal("2.68")),
        ("0.125", Decimal("0.13")),
        (Decimal("1.004"), Decimal("1.00")),
        (7, Decimal("7.00")),
    ],
)
def test_round_money_is_half_up(value: object, expected: Decimal) -> None:
    assert round_money(value) == expected


def test_charge_amount_cents() -> None:
    assert charge_amount_cents(Decimal("172.80")) == 17280
    assert charge_amount_cents(19.995) == 2000
    assert charge_amount_cents(0) == 0
