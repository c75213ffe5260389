from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Protocol


class CheckoutError(Exception):
    """Base class for checkout errors."""


class EmptyCartError(CheckoutError):
    def __init__(self) -> None:
        super().__init__("Cart is empty")


class InsufficientStockError(CheckoutError):
    def __init__(self, item_label: str, available: int, requested: int) -> None:
        super().__init__(
            f"Insufficient stock for {item_label}. Available: {available}, Requested: {requested}"
        )
        self.item_label = item_label
        self.available = available
        self.requested = requested


class ProductNotFoundError(CheckoutError):
    def __init__(self, product_id: str) -> None:
        super().__init__(f"Product not found: {product_id}")
        self.product_id = product_id


@dataclass(frozen=True, slots=True)
class Deal:
    id: str
    name: str
    discount_percent: Decimal
    start_time: datetime
    end_time: datetime

    def is_active(self, now: datetime) -> bool:
        return self.start_time <= now <= self.end_time


@dataclass(frozen=True, slots=True)
class ProductSnapshot:
    id: str
    name: str
    slug: str
    base_price: Decimal
    discounted_price: Decimal
    stock: int
    image: str | None = None
    deals: tuple[Deal, ...] = ()


@dataclass(frozen=True, slots=True)
class CartLine:
    id: str
    product_id: str
    quantity: int


@dataclass(frozen=True, slots=True)
class Cart:
    id: str
    user_id: str
    lines: tuple[CartLine, ...] = ()


@dataclass(frozen=True, slots=True)
class Address:
    id: str
    type: str
    full_name: str
    street_line1: str
    street_line2: str | None
    city: str
    state: str
    zip_code: str
    country: str
    phone_number: str | None
    is_default: bool
    created_at: datetime


@dataclass(frozen=True, slots=True)
class PaymentMethod:
    """Saved instrument with provider tokens already stripped."""

    id: str
    type: str
    is_default: bool
    last4: str | None = None
    brand: str | None = None
    expiry_month: int | None = None
    expiry_year: int | None = None
    billing_name: str | None = None
    billing_email: str | None = None


@dataclass(frozen=True, slots=True)
class BuyerProfile:
    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    phone_number: str | None = None


@dataclass(frozen=True, slots=True)
class StockValidation:
    is_valid: bool
    errors: list[str] = field(default_factory=list)


class CartStore(Protocol):
    def get_cart_with_lines(self, user_id: str) -> Cart | None: ...


class ProductStore(Protocol):
    def get_product_snapshot(self, product_id: str) -> ProductSnapshot | None: ...


class AddressStore(Protocol):
    def list_addresses(self, user_id: str) -> list[Address]: ...


class PaymentMethodStore(Protocol):
    def list_payment_methods(self, user_id: str) -> list[PaymentMethod]: ...


class UserStore(Protocol):
    def get_buyer_profile(self, user_id: str) -> BuyerProfile | None: ...


class CheckoutStore(CartStore, ProductStore, AddressStore, PaymentMethodStore, UserStore, Protocol):
    pass


class Clock(Protocol):
    def now(self) -> datetime: ...
