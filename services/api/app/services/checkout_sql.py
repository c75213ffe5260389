from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from services.api.app.db import models
from services.api.app.services.checkout_base import (
    Address,
    BuyerProfile,
    Cart,
    CartLine,
    Deal,
    PaymentMethod,
    ProductSnapshot,
)

_HUNDRED = Decimal("100")


def _dollars(cents: int) -> Decimal:
    return Decimal(cents) / _HUNDRED


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class SqlCheckoutStore:
    """Reads checkout inputs from the storefront database. Never writes."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def get_cart_with_lines(self, user_id: str) -> Cart | None:
        cart = (
            self._db.query(models.Cart)
            .filter(models.Cart.user_id == user_id)
            .order_by(models.Cart.created_at.asc())
            .first()
        )
        if cart is None:
            return None

        items = (
            self._db.query(models.CartItem)
            .filter(models.CartItem.cart_id == cart.id)
            .order_by(models.CartItem.position.asc(), models.CartItem.created_at.asc())
            .all()
        )
        return Cart(
            id=cart.id,
            user_id=cart.user_id,
            lines=tuple(
                CartLine(id=item.id, product_id=item.product_id, quantity=item.quantity)
                for item in items
            ),
        )

    def get_product_snapshot(self, product_id: str) -> ProductSnapshot | None:
        product = self._db.get(models.Product, product_id)
        if product is None:
            return None

        deal_rows = (
            self._db.query(models.Deal)
            .join(models.ProductDeal, models.ProductDeal.deal_id == models.Deal.id)
            .filter(models.ProductDeal.product_id == product_id)
            .order_by(models.ProductDeal.position.asc(), models.Deal.created_at.asc())
            .all()
        )

        return ProductSnapshot(
            id=product.id,
            name=product.name,
            slug=product.slug,
            base_price=_dollars(product.price_cents),
            discounted_price=_dollars(product.discounted_price_cents),
            stock=product.stock,
            image=product.main_image,
            deals=tuple(
                Deal(
                    id=d.id,
                    name=d.name,
                    discount_percent=Decimal(str(d.discount_percent)),
                    start_time=_naive_utc(d.start_time),
                    end_time=_naive_utc(d.end_time),
                )
                for d in deal_rows
            ),
        )

    def list_addresses(self, user_id: str) -> list[Address]:
        rows = (
            self._db.query(models.Address)
            .filter(models.Address.user_id == user_id)
            .order_by(models.Address.is_default.desc(), models.Address.created_at.desc())
            .all()
        )
        return [
            Address(
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
                created_at=a.created_at,
            )
            for a in rows
        ]

    def list_payment_methods(self, user_id: str) -> list[PaymentMethod]:
        # Select only display columns; provider_payment_method_id is never loaded.
        rows = (
            self._db.query(
                models.PaymentMethod.id,
                models.PaymentMethod.type,
                models.PaymentMethod.is_default,
                models.PaymentMethod.last4,
                models.PaymentMethod.brand,
                models.PaymentMethod.expiry_month,
                models.PaymentMethod.expiry_year,
                models.PaymentMethod.billing_name,
                models.PaymentMethod.billing_email,
            )
            .filter(models.PaymentMethod.user_id == user_id)
            .order_by(models.PaymentMethod.is_default.desc(), models.PaymentMethod.created_at.desc())
            .all()
        )
        return [
            PaymentMethod(
                id=r.id,
                type=r.type,
                is_default=r.is_default,
                last4=r.last4,
                brand=r.brand,
                expiry_month=r.expiry_month,
                expiry_year=r.expiry_year,
                billing_name=r.billing_name,
                billing_email=r.billing_email,
            )
            for r in rows
        ]

    def get_buyer_profile(self, user_id: str) -> BuyerProfile | None:
        user = self._db.get(models.User, user_id)
        if user is None:
            return None
        return BuyerProfile(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            phone_number=user.phone_number,
        )
