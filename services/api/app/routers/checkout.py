from __future__ import annotations

import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException
from services.api.app.db.deps import get_checkout_store, get_clock, get_current_user_id
from services.api.app.models.checkout import (
    ActiveDealOut,
    AddressOut,
    BuyerOut,
    CheckoutCartOut,
    CheckoutLineOut,
    CheckoutSummaryResponse,
    OrderSummaryOut,
    PaymentMethodOut,
    StockValidationResponse,
)
from services.api.app.services.checkout import (
    CheckoutSummary,
    ResolvedLine,
    assemble_checkout_summary,
    validate_cart_stock,
)
from services.api.app.services.checkout_base import (
    CheckoutStore,
    Clock,
    EmptyCartError,
    InsufficientStockError,
)
from services.api.app.services.checkout_settings import CheckoutSettings
from services.api.app.services.pricing import charge_amount_cents

logger = logging.getLogger(__name__)

router = APIRouter()


def _raise_checkout_http_error(e: Exception, user_id: str) -> NoReturn:
    if isinstance(e, EmptyCartError):
        logger.info("Checkout rejected user_id=%s: empty cart", user_id)
        raise HTTPException(
            status_code=400,
            detail={"code": "EMPTY_CART", "message": str(e)},
        ) from e

    if isinstance(e, InsufficientStockError):
        logger.info("Checkout rejected user_id=%s: %s", user_id, e)
        raise HTTPException(
            status_code=409,
            detail={
                "code": "INSUFFICIENT_STOCK",
                "message": str(e),
                "product": e.item_label,
                "available": e.available,
                "requested": e.requested,
            },
        ) from e

    logger.exception("Checkout failed user_id=%s", user_id)
    raise HTTPException(status_code=500, detail="Internal Server Error") from e


def _line_out(resolved: ResolvedLine) -> CheckoutLineOut:
    product = resolved.product
    deal = resolved.active_deal
    return CheckoutLineOut(
        id=resolved.line.id,
        product_id=product.id,
        product_name=product.name,
        product_slug=product.slug,
        product_image=product.image,
        original_price=float(product.base_price),
        effective_price=float(resolved.effective_price),
        savings=float(resolved.savings_per_unit),
        quantity=resolved.line.quantity,
        item_total=float(resolved.line_total),
        stock=product.stock,
        active_deal=(
            ActiveDealOut(
                id=deal.id,
                name=deal.name,
                discount=float(deal.discount_percent),
                end_time=deal.end_time.isoformat(),
            )
            if deal is not None
            else None
        ),
    )


def _summary_out(summary: CheckoutSummary) -> CheckoutSummaryResponse:
    totals = summary.order_summary
    return CheckoutSummaryResponse(
        cart=CheckoutCartOut(
            id=summary.cart.id,
            items=[_line_out(r) for r in summary.lines],
            item_count=summary.item_count,
        ),
        order_summary=OrderSummaryOut(
            subtotal=float(totals.subtotal),
            tax_amount=float(totals.tax_amount),
            shipping_cost=float(totals.shipping_cost),
            discount_amount=float(totals.discount_amount),
            total_amount=float(totals.total_amount),
            total_amount_cents=charge_amount_cents(totals.total_amount),
            free_shipping_eligible=totals.free_shipping_eligible,
            free_shipping_threshold=float(summary.free_shipping_threshold),
        ),
        addresses=[
            AddressOut(
                id=a.id,
                type=a.type,
                full_name=a.full_name,
                street_line1=a.street_line1,
                street_line2=a.street_line2,
                city=a.city,
                state=a.state,
                zip_code=a.zip_code,
                country=a.country,
                phone_number=a.phone_number,
                is_default=a.is_default,
                created_at=a.created_at.isoformat(),
            )
            for a in summary.addresses
        ],
        payment_methods=[
            PaymentMethodOut(
                id=pm.id,
                type=pm.type,
                is_default=pm.is_default,
                last4=pm.last4,
                brand=pm.brand,
                expiry_month=pm.expiry_month,
                expiry_year=pm.expiry_year,
                billing_name=pm.billing_name,
                billing_email=pm.billing_email,
            )
            for pm in summary.payment_methods
        ],
        user=(
            BuyerOut(
                id=summary.user.id,
                email=summary.user.email,
                first_name=summary.user.first_name,
                last_name=summary.user.last_name,
                phone_number=summary.user.phone_number,
            )
            if summary.user is not None
            else None
        ),
    )


@router.get("/v1/checkout/summary", response_model=CheckoutSummaryResponse)
def get_checkout_summary(
    user_id: str = Depends(get_current_user_id),
    store: CheckoutStore = Depends(get_checkout_store),
    clock: Clock = Depends(get_clock),
) -> CheckoutSummaryResponse:
    try:
        settings = CheckoutSettings.from_env()
        summary = assemble_checkout_summary(user_id, store, clock, settings)
    except Exception as e:
        _raise_checkout_http_error(e, user_id)

    return _summary_out(summary)


@router.post("/v1/checkout/validate-stock", response_model=StockValidationResponse)
def validate_stock(
    user_id: str = Depends(get_current_user_id),
    store: CheckoutStore = Depends(get_checkout_store),
) -> StockValidationResponse:
    try:
        result = validate_cart_stock(user_id, store)
    except Exception as e:
        _raise_checkout_http_error(e, user_id)

    return StockValidationResponse(is_valid=result.is_valid, errors=result.errors)
