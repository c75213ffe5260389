from __future__ import annotations

from pydantic import BaseModel, Field


class ActiveDealOut(BaseModel):
    id: str
    name: str
    discount: float
    end_time: str


class CheckoutLineOut(BaseModel):
    id: str
    product_id: str
    product_name: str
    product_slug: str
    product_image: str | None = None

    original_price: float
    effective_price: float
    savings: float
    quantity: int
    item_total: float
    stock: int
    active_deal: ActiveDealOut | None = None


class CheckoutCartOut(BaseModel):
    id: str
    items: list[CheckoutLineOut]
    item_count: int


class OrderSummaryOut(BaseModel):
    subtotal: float
    tax_amount: float
    shipping_cost: float
    discount_amount: float
    total_amount: float
    # Minor units a payment intent is created for.
    total_amount_cents: int
    free_shipping_eligible: bool
    free_shipping_threshold: float


class AddressOut(BaseModel):
    id: str
    type: str
    full_name: str
    street_line1: str
    street_line2: str | None = None
    city: str
    state: str
    zip_code: str
    country: str
    phone_number: str | None = None
    is_default: bool
    created_at: str


class PaymentMethodOut(BaseModel):
    id: str
    type: str
    is_default: bool
    last4: str | None = None
    brand: str | None = None
    expiry_month: int | None = None
    expiry_year: int | None = None
    billing_name: str | None = None
    billing_email: str | None = None


class BuyerOut(BaseModel):
    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    phone_number: str | None = None


class CheckoutSummaryResponse(BaseModel):
    cart: CheckoutCartOut
    order_summary: OrderSummaryOut
    addresses: list[AddressOut] = Field(default_factory=list)
    payment_methods: list[PaymentMethodOut] = Field(default_factory=list)
    user: BuyerOut | None = None


class StockValidationResponse(BaseModel):
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
