from __future__ import annotations

from decimal import Decimal

import pytest
from services.api.app.services.checkout_settings import CheckoutSettings


def test_defaults_when_env_is_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("STOREFRONT_TAX_RATE", "STOREFRONT_FREE_SHIPPING_THRESHOLD", "STOREFRONT_SHIPPING_RATE"):
        monkeypatch.delenv(name, raising=False)

    settings = CheckoutSettings.from_env()

    assert settings == CheckoutSettings()
    assert settings.tax_rate == Decimal("0.08")
    assert settings.free_shipping_threshold == Decimal("50")
    assert settings.shipping_rate == Decimal("5.99")
    assert settings.discount_amount == 0


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STOREFRONT_TAX_RATE", "0.0725")
    monkeypatch.setenv("STOREFRONT_FREE_SHIPPING_THRESHOLD", " 75 ")
    monkeypatch.setenv("STOREFRONT_SHIPPING_RATE", "")

    settings = CheckoutSettings.from_env()

    assert settings.tax_rate == Decimal("0.0725")
    assert settings.free_shipping_threshold == Decimal("75")
    assert settings.shipping_rate == Decimal("5.99")


@pytest.mark.parametrize("raw", ["abc", "-1", "NaN"])
def test_invalid_values_name_the_variable(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("STOREFRONT_TAX_RATE", raw)

    with pytest.raises(ValueError, match="STOREFRONT_TAX_RATE"):
        CheckoutSettings.from_env()
