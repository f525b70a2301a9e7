"""Unit tests for the Price Authority and the Cart Validator."""

import pytest

from checkout.domain.exceptions import (
    EmptyCart,
    InsufficientStock,
    ProductUnavailable,
    ValidationError,
)
from checkout.domain.model.cart import CartLine
from checkout.domain.model.product import PricedProduct, Product
from checkout.domain.model.value_objects import Money
from checkout.domain.service.cart_validator import CartValidator, requested_product_ids
from checkout.domain.service.price_authority import PriceAuthority
from tests.fakes import FakeProductRepository, FakeStore


def _catalog() -> list[Product]:
    return [
        Product(id=1, name="Intense Wood", price=Money.of("4500"), sale_price=Money.of("3800"), stock=50),
        Product(id=2, name="Ocean Blue", price=Money.of("3200"), stock=3),
        Product(id=3, name="Dark Ember", price=Money.of("5200"), stock=28, is_active=False),
        Product(id=4, name="Odd Sale", price=Money.of("1000"), sale_price=Money.of("1500"), stock=5),
    ]


def _priced() -> dict[int, PricedProduct]:
    store = FakeStore(_catalog())
    return PriceAuthority(FakeProductRepository(store)).resolve([1, 2, 3, 4])


class TestProduct:

    def test_sale_price_wins_when_lower(self):
        assert _catalog()[0].effective_price == Money.of("3800")

    def test_sale_price_ignored_when_higher(self):
        assert _catalog()[3].effective_price == Money.of("1000")

    def test_negative_stock_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Product(id=9, name="X", price=Money.of("1"), stock=-1)


class TestPriceAuthority:

    def test_resolves_active_products_only(self):
        priced = _priced()
        assert set(priced) == {1, 2, 4}

    def test_reports_list_and_effective_price(self):
        wood = _priced()[1]
        assert wood.unit_price == Money.of("4500")
        assert wood.effective_price == Money.of("3800")
        assert wood.stock == 50

    def test_unknown_ids_are_absent(self):
        store = FakeStore(_catalog())
        assert PriceAuthority(FakeProductRepository(store)).resolve([99]) == {}

    def test_no_ids_means_no_lookup(self):
        store = FakeStore(_catalog())
        assert PriceAuthority(FakeProductRepository(store)).resolve([]) == {}
        assert store.lookups == 0

    def test_duplicate_ids_resolved_once(self):
        store = FakeStore(_catalog())
        priced = PriceAuthority(FakeProductRepository(store)).resolve([2, 2, 2])
        assert list(priced) == [2]
        assert store.lookups == 1


class TestRequestedProductIds:

    def test_skips_unparseable_ids(self):
        lines = [CartLine("1"), CartLine(2), CartLine("abc"), CartLine(None)]
        assert requested_product_ids(lines) == {1, 2}


class TestCartValidator:

    def test_builds_snapshot_items_at_effective_price(self):
        items = CartValidator().validate([CartLine(1, 2)], _priced())
        assert len(items) == 1
        assert items[0].product_name == "Intense Wood"
        assert items[0].unit_price == Money.of("3800")
        assert items[0].line_total == Money.of("7600")

    def test_quantity_is_coerced(self):
        items = CartValidator().validate(
            [CartLine(2, "abc"), CartLine(1, 2.7), CartLine(4, -3)], _priced()
        )
        assert [i.quantity.value for i in items] == [1, 2, 1]

    def test_empty_cart_rejected(self):
        with pytest.raises(EmptyCart, match="Cart is empty"):
            CartValidator().validate([], _priced())

    def test_inactive_product_rejected(self):
        with pytest.raises(ProductUnavailable) as exc_info:
            CartValidator().validate([CartLine(1), CartLine(3)], _priced())
        assert exc_info.value.product_id == 3

    def test_unknown_product_rejected(self):
        with pytest.raises(ProductUnavailable):
            CartValidator().validate([CartLine(42)], _priced())

    def test_malformed_id_rejected(self):
        with pytest.raises(ProductUnavailable):
            CartValidator().validate([CartLine("not-an-id")], _priced())

    def test_superscript_digit_id_rejected(self):
        with pytest.raises(ProductUnavailable):
            CartValidator().validate([CartLine("\u00b2")], _priced())

    def test_insufficient_stock_names_product_and_remaining(self):
        with pytest.raises(InsufficientStock, match='"Ocean Blue" - only 3 left in stock'):
            CartValidator().validate([CartLine(2, 4)], _priced())

    def test_exact_stock_accepted(self):
        items = CartValidator().validate([CartLine(2, 3)], _priced())
        assert items[0].quantity.value == 3

    def test_repeated_product_checked_cumulatively(self):
        with pytest.raises(InsufficientStock):
            CartValidator().validate([CartLine(2, 2), CartLine("2", 2)], _priced())

    def test_first_bad_line_wins(self):
        with pytest.raises(ProductUnavailable):
            CartValidator().validate([CartLine(99), CartLine(2, 10)], _priced())
