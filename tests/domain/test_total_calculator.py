"""Unit tests for the Total Calculator."""

import random
from decimal import Decimal

import pytest

from checkout.domain.model.order import OrderLineItem
from checkout.domain.model.value_objects import Money, Quantity
from checkout.domain.service.total_calculator import (
    DiscountPolicy,
    PricingRules,
    TotalCalculator,
)


def _item(price: str, qty: int = 1, product_id: int = 1) -> OrderLineItem:
    return OrderLineItem(
        product_id=product_id,
        product_name=f"Product {product_id}",
        quantity=Quantity(qty),
        unit_price=Money.of(price),
    )


class _FlatDiscount(DiscountPolicy):

    def __init__(self, amount: str) -> None:
        self._amount = Money.of(amount)

    def discount_for(self, items, subtotal):
        return self._amount


class TestShipping:

    def test_below_threshold_pays_fee(self):
        totals = TotalCalculator().calculate([_item("4999")])
        assert totals.shipping_fee == Money.of("200")
        assert totals.total == Money.of("5199")
        assert not totals.free_shipping

    def test_at_threshold_ships_free(self):
        totals = TotalCalculator().calculate([_item("5000")])
        assert totals.shipping_fee == Money.zero()
        assert totals.total == Money.of("5000")
        assert totals.free_shipping

    def test_threshold_uses_subtotal_across_lines(self):
        totals = TotalCalculator().calculate([_item("2500", 1, 1), _item("1250", 2, 2)])
        assert totals.subtotal == Money.of("5000")
        assert totals.free_shipping

    def test_custom_rules(self):
        rules = PricingRules(
            free_shipping_threshold=Money.of("1000"),
            shipping_fee=Money.of("150"),
        )
        totals = TotalCalculator(rules).calculate([_item("999")])
        assert totals.total == Money.of("1149")


class TestSurcharge:

    @pytest.mark.parametrize(
        "option, fee", [("none", "0"), ("standard", "300"), ("premium", "600")]
    )
    def test_wrapping_fee(self, option, fee):
        totals = TotalCalculator().calculate([_item("1000")], option)
        assert totals.surcharge == Money.of(fee)
        assert totals.total == Money.of("1200") + Money.of(fee)

    def test_unknown_option_means_no_wrapping(self):
        totals = TotalCalculator().calculate([_item("1000")], "gold-leaf")
        assert totals.surcharge == Money.zero()

    def test_option_is_case_insensitive(self):
        assert PricingRules().normalize_wrapping(" Premium ") == "premium"
        assert PricingRules().normalize_wrapping(None) == "none"


class TestDiscount:

    def test_no_discount_by_default(self):
        totals = TotalCalculator().calculate([_item("1000")])
        assert totals.discount == Money.zero()

    def test_discount_subtracted(self):
        totals = TotalCalculator(discount_policy=_FlatDiscount("500")).calculate(
            [_item("1000")], "standard"
        )
        assert totals.total == Money.of("1000")

    def test_total_never_negative(self):
        totals = TotalCalculator(discount_policy=_FlatDiscount("99999")).calculate(
            [_item("1000")]
        )
        assert totals.total == Money.zero()


class TestExactArithmetic:

    @pytest.mark.parametrize("seed", range(5))
    def test_matches_integer_reference(self, seed):
        rng = random.Random(seed)
        items = []
        expected_minor = 0
        for i in range(rng.randint(1, 100)):
            cents = rng.randint(1, 999_999)
            qty = rng.randint(1, 10)
            items.append(_item(str(Decimal(cents).scaleb(-2)), qty, i + 1))
            expected_minor += cents * qty

        totals = TotalCalculator().calculate(items, "premium")

        shipping_minor = 0 if expected_minor >= 500_000 else 20_000
        assert totals.subtotal.minor_units == expected_minor
        assert totals.total.minor_units == expected_minor + shipping_minor + 60_000
