"""Integration tests for the processor webhook (Confirm Payment) use case."""

import json

import pytest

from checkout.application.confirm_payment import (
    AMOUNT_MISMATCH,
    APPLIED,
    DUPLICATE,
    IGNORED,
    ORDER_MISMATCH,
    PAYMENT_FAILED_ACK,
    UNMATCHED,
    ConfirmPaymentHandler,
)
from checkout.application.create_order import CreateOrderHandler
from checkout.application.dto import CheckoutRequest
from checkout.domain.exceptions import StorageFailure
from checkout.domain.model.cart import CartLine
from checkout.domain.model.order import OrderStatus, PaymentStatus
from checkout.domain.model.product import Product
from checkout.domain.model.value_objects import Money
from checkout.domain.service.fulfillment import (
    FulfillmentDispatcher,
    ManualConfirmationChannel,
    ProcessorChannel,
)
from checkout.domain.service.payment_gateway import PAYMENT_FAILED, PAYMENT_SUCCEEDED
from tests.fakes import FakePaymentGateway, FakeStore


def _setup() -> tuple[ConfirmPaymentHandler, FakeStore, FakePaymentGateway]:
    """Fake store holding one card order (id 1, intent pi_1, total Rs. 3,400)."""
    store = FakeStore([Product(id=1, name="Ocean Blue", price=Money.of("3200"), stock=10)])
    gateway = FakePaymentGateway()
    checkout = CreateOrderHandler(
        store.uow_factory,
        FulfillmentDispatcher(ManualConfirmationChannel(), ProcessorChannel(gateway)),
    )
    checkout.handle(
        CheckoutRequest(
            customer_name="Hamza",
            customer_phone="0333",
            customer_city="Islamabad",
            customer_address="F-7",
            items=[CartLine(1, 1)],
            payment_method="card",
        )
    )
    return ConfirmPaymentHandler(store.uow_factory, gateway), store, gateway


def _event(
    type_: str = PAYMENT_SUCCEEDED,
    intent_id: str | None = "pi_1",
    amount_minor: int | None = 340000,
    event_id: str = "evt_1",
    charge_id: str | None = "ch_1",
    metadata: dict[str, str] | None = None,
) -> bytes:
    return json.dumps({
        "id": event_id,
        "type": type_,
        "intent_id": intent_id,
        "amount_minor": amount_minor,
        "charge_id": charge_id,
        "metadata": metadata or {},
    }).encode()


class TestConfirmPayment:

    def test_success_marks_order_paid_and_confirmed(self):
        handler, store, gateway = _setup()
        result = handler.receive(_event(), gateway.signature)

        assert (result.status_code, result.outcome, result.order_id) == (200, APPLIED, 1)
        order = store.orders[1]
        assert order.payment_status == PaymentStatus.PAID
        assert order.status == OrderStatus.CONFIRMED
        assert order.settlement_reference == "ch_1"
        assert order.paid_at is not None

    def test_settlement_falls_back_to_event_id(self):
        handler, store, gateway = _setup()
        handler.receive(_event(charge_id=None), gateway.signature)
        assert store.orders[1].settlement_reference == "evt_1"

    def test_matching_order_tag_applied(self):
        handler, store, gateway = _setup()
        result = handler.receive(_event(metadata={"order_id": "1"}), gateway.signature)
        assert result.outcome == APPLIED
        assert store.orders[1].payment_status == PaymentStatus.PAID

    def test_replay_is_idempotent(self):
        handler, store, gateway = _setup()
        handler.receive(_event(), gateway.signature)
        first = store.orders[1]
        commits = store.commits

        result = handler.receive(_event(event_id="evt_2", charge_id="ch_2"), gateway.signature)

        assert (result.status_code, result.outcome) == (200, DUPLICATE)
        again = store.orders[1]
        assert again.settlement_reference == "ch_1"
        assert again.paid_at == first.paid_at
        assert store.commits == commits


class TestConfirmPaymentRejections:

    def test_bad_signature_answers_400_and_changes_nothing(self):
        handler, store, _ = _setup()
        result = handler.receive(_event(), "forged")
        assert (result.status_code, result.outcome) == (400, "signature_invalid")
        assert store.orders[1].payment_status == PaymentStatus.PENDING

    def test_missing_signature_answers_400(self):
        handler, _, _ = _setup()
        assert handler.receive(_event(), None).status_code == 400

    def test_unknown_intent_acknowledged(self):
        handler, store, gateway = _setup()
        result = handler.receive(_event(intent_id="pi_999"), gateway.signature)
        assert (result.status_code, result.outcome) == (200, UNMATCHED)
        assert store.orders[1].payment_status == PaymentStatus.PENDING

    def test_amount_mismatch_not_applied(self):
        handler, store, gateway = _setup()
        result = handler.receive(_event(amount_minor=100), gateway.signature)
        assert (result.status_code, result.outcome) == (200, AMOUNT_MISMATCH)
        assert store.orders[1].payment_status == PaymentStatus.PENDING

    def test_order_tag_mismatch_not_applied(self):
        handler, store, gateway = _setup()
        result = handler.receive(_event(metadata={"order_id": "99"}), gateway.signature)
        assert (result.status_code, result.outcome, result.order_id) == (200, ORDER_MISMATCH, 1)
        assert store.orders[1].payment_status == PaymentStatus.PENDING

    def test_failed_payment_acknowledged(self):
        handler, store, gateway = _setup()
        result = handler.receive(_event(type_=PAYMENT_FAILED), gateway.signature)
        assert (result.status_code, result.outcome) == (200, PAYMENT_FAILED_ACK)
        assert store.orders[1].status == OrderStatus.PENDING

    def test_other_event_types_ignored(self):
        handler, _, gateway = _setup()
        result = handler.receive(_event(type_="charge.refunded"), gateway.signature)
        assert (result.status_code, result.outcome) == (200, IGNORED)

    def test_storage_failure_propagates_for_retry(self, monkeypatch):
        handler, store, gateway = _setup()

        def broken_commit(self):
            raise StorageFailure("Storage error during commit")

        monkeypatch.setattr("tests.fakes.FakeUnitOfWork.commit", broken_commit)
        with pytest.raises(StorageFailure):
            handler.receive(_event(), gateway.signature)
        assert store.orders[1].payment_status == PaymentStatus.PENDING
