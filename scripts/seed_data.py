from __future__ import annotations

import argparse
from datetime import timedelta
from uuid import uuid4

from services.api.app.db.database import db_session
from services.api.app.db.init_db import init_db
from services.api.app.db.models import (
    Address,
    Cart,
    CartItem,
    Deal,
    PaymentMethod,
    Product,
    ProductDeal,
    User,
    utcnow,
)

_PRODUCTS = (
    # id, name, price_cents, discounted_price_cents, stock
    ("p-headphones", "Wireless Headphones", 10000, 9000, 5),
    ("p-mug", "Ceramic Mug", 1500, 1299, 40),
    ("p-notebook", "Dotted Notebook", 899, 899, 1),
)


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed a demo buyer with a ready-to-checkout cart")
    parser.add_argument("--user-id", default="u-1")
    parser.add_argument("--email", default="buyer@example.com")
    parser.add_argument("--deal-percent", type=float, default=20.0)
    parser.add_argument("--deal-days", type=int, default=7)
    args = parser.parse_args()

    init_db()

    db = db_session()
    try:
        now = utcnow()

        if db.get(User, args.user_id) is None:
            db.add(
                User(
                    id=args.user_id,
                    email=args.email,
                    first_name="Demo",
                    last_name="Buyer",
                    phone_number="+1-555-0100",
                )
            )

        for pid, name, price, discounted, stock in _PRODUCTS:
            if db.get(Product, pid) is None:
                db.add(
                    Product(
                        id=pid,
                        name=name,
                        slug=pid.removeprefix("p-"),
                        price_cents=price,
                        discounted_price_cents=discounted,
                        stock=stock,
                    )
                )

        # Deals
        if db.get(Deal, "d-launch") is None:
            db.add(
                Deal(
                    id="d-launch",
                    name="Launch Week",
                    discount_percent=args.deal_percent,
                    start_time=now - timedelta(days=1),
                    end_time=now + timedelta(days=args.deal_days),
                )
            )
            db.add(ProductDeal(product_id="p-headphones", deal_id="d-launch", position=0))

        cart = db.query(Cart).filter(Cart.user_id == args.user_id).first()
        if cart is None:
            cart = Cart(id=uuid4().hex, user_id=args.user_id)
            db.add(cart)
            for position, (pid, qty) in enumerate((("p-headphones", 2), ("p-mug", 1))):
                db.add(
                    CartItem(
                        id=uuid4().hex,
                        cart_id=cart.id,
                        product_id=pid,
                        quantity=qty,
                        position=position,
                    )
                )

        existing_addresses = (
            db.query(Address).filter(Address.user_id == args.user_id).limit(1).count()
        )
        if existing_addresses == 0:
            db.add(
                Address(
                    id=uuid4().hex,
                    user_id=args.user_id,
                    full_name="Demo Buyer",
                    street_line1="1 Market St",
                    city="San Francisco",
                    state="CA",
                    zip_code="94105",
                    is_default=True,
                )
            )

        existing_cards = (
            db.query(PaymentMethod).filter(PaymentMethod.user_id == args.user_id).limit(1).count()
        )
        if existing_cards == 0:
            db.add(
                PaymentMethod(
                    id=uuid4().hex,
                    user_id=args.user_id,
                    is_default=True,
                    provider_payment_method_id=f"pm_demo_{uuid4().hex[:12]}",
                    last4="4242",
                    brand="visa",
                    expiry_month=12,
                    expiry_year=now.year + 3,
                    billing_name="Demo Buyer",
                    billing_email=args.email,
                )
            )

        db.commit()
        print(f"Seeded user={args.user_id}")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
