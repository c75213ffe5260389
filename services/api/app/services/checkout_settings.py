from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

DEFAULT_TAX_RATE = Decimal("0.08")
DEFAULT_FREE_SHIPPING_THRESHOLD = Decimal("50")
DEFAULT_SHIPPING_RATE = Decimal("5.99")


def _env_decimal(name: str, default: Decimal) -> Decimal:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default

    try:
        value = Decimal(raw)
    except InvalidOperation as e:
        raise ValueError(f"Invalid {name}={raw!r}. Expected a decimal number.") from e

    if not value.is_finite() or value < 0:
        raise ValueError(f"Invalid {name}={raw!r}. Expected a non-negative number.")
    return value


@dataclass(frozen=True, slots=True)
class CheckoutSettings:
    tax_rate: Decimal = DEFAULT_TAX_RATE
    free_shipping_threshold: Decimal = DEFAULT_FREE_SHIPPING_THRESHOLD
    shipping_rate: Decimal = DEFAULT_SHIPPING_RATE
    discount_amount: Decimal = Decimal("0")

    @classmethod
    def from_env(cls) -> "CheckoutSettings":
        return cls(
            tax_rate=_env_decimal("STOREFRONT_TAX_RATE", DEFAULT_TAX_RATE),
            free_shipping_threshold=_env_decimal(
                "STOREFRONT_FREE_SHIPPING_THRESHOLD", DEFAULT_FREE_SHIPPING_THRESHOLD
            ),
            shipping_rate=_env_decimal("STOREFRONT_SHIPPING_RATE", DEFAULT_SHIPPING_RATE),
        )
