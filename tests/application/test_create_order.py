"""Integration tests for the Checkout (CreateOrder) use case.

Uses the in-memory fake store, no file I/O.
"""

import threading
from decimal import Decimal

import pytest

from checkout.application.create_order import CreateOrderHandler
from checkout.application.dto import CheckoutRequest
from checkout.domain.exceptions import (
    EmptyCart,
    InsufficientStock,
    InvalidPaymentSelector,
    ProductUnavailable,
    UpstreamChannelFailure,
    ValidationError,
)
from checkout.domain.model.cart import CartLine
from checkout.domain.model.identity import Identity
from checkout.domain.model.order import OrderStatus
from checkout.domain.model.product import Product
from checkout.domain.model.value_objects import Money
from checkout.domain.service.fulfillment import (
    FulfillmentDispatcher,
    ManualConfirmationChannel,
    ProcessorChannel,
)
from tests.fakes import FakePaymentGateway, FakeStore


def _setup(
    products: list[Product] | None = None,
    gateway: FakePaymentGateway | None = None,
) -> tuple[CreateOrderHandler, FakeStore]:
    """Build handler over a fake store, optionally pre-loaded with products."""
    if products is None:
        products = [
            Product(id=1, name="Intense Wood", price=Money.of("4500"), sale_price=Money.of("3800"), stock=50),
            Product(id=2, name="Ocean Blue", price=Money.of("3200"), stock=65),
            Product(id=3, name="Royal Oud", price=Money.of("7500"), sale_price=Money.of("6500"), stock=1),
            Product(id=4, name="Dark Ember", price=Money.of("5200"), stock=28, is_active=False),
        ]
    store = FakeStore(products)
    dispatcher = FulfillmentDispatcher(
        manual=ManualConfirmationChannel(),
        processor=ProcessorChannel(gateway or FakePaymentGateway()),
    )
    return CreateOrderHandler(store.uow_factory, dispatcher), store


def _line(product_id: int, quantity: int = 1) -> CartLine:
    return CartLine(product_id=product_id, quantity=quantity)


def _request(items, **overrides) -> CheckoutRequest:
    fields = dict(
        customer_name="Ayesha",
        customer_phone="03001234567",
        customer_city="Lahore",
        customer_address="12 Mall Road",
        items=items,
    )
    fields.update(overrides)
    return CheckoutRequest(**fields)


def _payload(items, **overrides) -> dict:
    payload = {
        "customer_name": "Ayesha",
        "customer_phone": "03001234567",
        "customer_city": "Lahore",
        "customer_address": "12 Mall Road",
        "items": items,
    }
    payload.update(overrides)
    return payload


class TestCheckoutHappyPath:

    def test_manual_order_with_totals(self):
        handler, store = _setup()
        request = CheckoutRequest.from_payload(
            _payload([{"product_id": 1, "quantity": 2}, {"product_id": 2, "quantity": 1}])
        )
        response = handler.handle(request)

        assert response.order_id == 1
        assert Decimal(response.summary.subtotal) == Decimal("10800")
        assert response.summary.free_shipping
        assert response.summary.total_display == "Rs. 10,800"
        assert response.handle["channel"] == "manual"
        assert "wa.me" in response.handle["message_url"]

        saved = store.orders[1]
        assert saved.status == OrderStatus.PENDING_MANUAL_CONFIRMATION
        assert saved.payment_method == "cod"
        assert store.stock_of(1) == 48
        assert store.stock_of(2) == 64

    def test_client_prices_are_ignored(self):
        handler, store = _setup()
        request = CheckoutRequest.from_payload(
            _payload([{"product_id": 2, "quantity": 1, "price": 1, "unit_price": "0.01"}])
        )
        response = handler.handle(request)
        assert Decimal(response.summary.items[0].unit_price) == Decimal("3200")
        assert store.orders[response.order_id].total == Money.of("3400")

    def test_card_order_gets_client_secret(self):
        gateway = FakePaymentGateway()
        handler, store = _setup(gateway=gateway)
        response = handler.handle(_request([_line(2)], payment_method="CARD"))

        assert response.as_dict()["client_secret"] == "pi_1_secret"
        saved = store.orders[1]
        assert saved.status == OrderStatus.PENDING
        assert saved.payment_reference == "pi_1"
        assert gateway.created == [1]

    def test_gift_wrapping_adds_surcharge(self):
        handler, _ = _setup()
        response = handler.handle(_request([_line(2)], gift_wrapping="standard"))
        assert Decimal(response.summary.surcharge) == Decimal("300")
        assert Decimal(response.summary.total) == Decimal("3700")

    def test_unknown_wrapping_treated_as_none(self):
        handler, store = _setup()
        response = handler.handle(_request([_line(2)], gift_wrapping="diamond"))
        assert Decimal(response.summary.surcharge) == 0
        assert store.orders[1].gift_wrapping == "none"

    def test_identity_is_recorded(self):
        handler, store = _setup()
        handler.handle(_request([_line(2)]), identity=Identity(id=7))
        assert store.orders[1].customer.user_id == 7

    def test_sequential_ids(self):
        handler, _ = _setup()
        first = handler.handle(_request([_line(2)]))
        second = handler.handle(_request([_line(1)]))
        assert second.order_id == first.order_id + 1


class TestCheckoutPriceLock:

    def test_price_snapshot_at_creation(self):
        handler, store = _setup()
        response = handler.handle(_request([_line(2)]))

        store.products[2].update_price(Money.of("9999"))

        saved = store.orders[response.order_id]
        assert saved.items[0].unit_price == Money.of("3200")
        assert saved.total == Money.of("3400")

    def test_sale_price_is_charged(self):
        handler, store = _setup()
        handler.handle(_request([_line(3)]))
        assert store.orders[1].items[0].unit_price == Money.of("6500")


class TestCheckoutRejections:

    def test_empty_cart_does_no_lookup(self):
        handler, store = _setup()
        with pytest.raises(EmptyCart):
            handler.handle(_request([]))
        assert store.lookups == 0
        assert store.orders == {}

    def test_insufficient_stock_leaves_no_order(self):
        handler, store = _setup()
        with pytest.raises(InsufficientStock, match='"Royal Oud" - only 1 left'):
            handler.handle(_request([_line(2), _line(3, 2)]))
        assert store.orders == {}
        assert store.stock_of(2) == 65

    def test_inactive_product_rejected(self):
        handler, store = _setup()
        with pytest.raises(ProductUnavailable):
            handler.handle(_request([_line(4)]))
        assert store.orders == {}

    def test_unknown_payment_method_rejected_before_lookup(self):
        handler, store = _setup()
        with pytest.raises(InvalidPaymentSelector):
            handler.handle(_request([_line(2)], payment_method="bitcoin"))
        assert store.lookups == 0

    def test_missing_customer_field_rejected(self):
        handler, store = _setup()
        with pytest.raises(ValidationError, match="Customer address is required"):
            handler.handle(_request([_line(2)], customer_address="  "))
        assert store.lookups == 0

    def test_processor_failure_rolls_back_order_and_stock(self):
        handler, store = _setup(gateway=FakePaymentGateway(fail=True))
        with pytest.raises(UpstreamChannelFailure):
            handler.handle(_request([_line(2, 3)], payment_method="card"))
        assert store.orders == {}
        assert store.stock_of(2) == 65

    def test_malformed_payload_rejected(self):
        with pytest.raises(ValidationError, match="items must be a list"):
            CheckoutRequest.from_payload(_payload("1:2"))


class TestConcurrentCheckout:

    def test_last_unit_sold_once(self):
        workers = 8
        handler, store = _setup()
        store.read_barrier = threading.Barrier(workers, timeout=10)
        outcomes: list[str] = []
        outcomes_lock = threading.Lock()

        def buy() -> None:
            try:
                handler.handle(_request([_line(3)]))
                result = "ok"
            except InsufficientStock:
                result = "sold_out"
            with outcomes_lock:
                outcomes.append(result)

        threads = [threading.Thread(target=buy) for _ in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        assert sorted(outcomes) == ["ok"] + ["sold_out"] * (workers - 1)
        assert store.stock_of(3) == 0
        assert len(store.orders) == 1