"""Application service: Confirm Payment use case (processor webhook).

Verifies the processor's signed event, then applies a successful payment
to the order that carries the event's intent id.  Orders are looked up by
intent id only, so a forged event cannot target an arbitrary order id.

Answers 400 only for signature failures; every business-level mismatch
(unknown intent, replay, amount or order-tag mismatch, unhandled event
type) is acknowledged with 200 so the processor never retries it.
"""

from __future__ import annotations

import structlog

from checkout.application.dto import WebhookResult
from checkout.domain.exceptions import SignatureInvalid
from checkout.domain.repository.unit_of_work import UnitOfWorkFactory
from checkout.domain.service.payment_gateway import (
    PAYMENT_FAILED,
    PAYMENT_SUCCEEDED,
    PaymentEvent,
    PaymentGateway,
)

log = structlog.get_logger(__name__)

APPLIED = "applied"
DUPLICATE = "duplicate"
UNMATCHED = "unmatched"
AMOUNT_MISMATCH = "amount_mismatch"
ORDER_MISMATCH = "order_mismatch"
PAYMENT_FAILED_ACK = "payment_failed"
IGNORED = "ignored"


class ConfirmPaymentHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory, gateway: PaymentGateway) -> None:
        self._uow_factory = uow_factory
        self._gateway = gateway

    def receive(self, payload: bytes, signature: str | None) -> WebhookResult:
        """Entry point for the webhook endpoint."""
        try:
            event = self._gateway.parse_event(payload, signature)
        except SignatureInvalid as exc:
            log.warning("webhook_signature_invalid", error=str(exc))
            return WebhookResult(status_code=exc.http_status, outcome=exc.kind)

        return self.apply(event)

    def apply(self, event: PaymentEvent) -> WebhookResult:
        bound = log.bind(event_id=event.id, event_type=event.type, intent_id=event.intent_id)

        if event.type == PAYMENT_FAILED:
            bound.warning("payment_failed")
            return WebhookResult(200, PAYMENT_FAILED_ACK)
        if event.type != PAYMENT_SUCCEEDED or not event.intent_id:
            bound.info("webhook_ignored")
            return WebhookResult(200, IGNORED)

        with self._uow_factory() as uow:
            order = uow.orders.get_by_payment_reference(event.intent_id)
            if order is None:
                bound.warning("payment_intent_unmatched")
                return WebhookResult(200, UNMATCHED)

            if event.amount_minor is not None and event.amount_minor != order.total.minor_units:
                bound.warning(
                    "payment_amount_mismatch",
                    order_id=order.id,
                    expected=order.total.minor_units,
                    received=event.amount_minor,
                )
                return WebhookResult(200, AMOUNT_MISMATCH, order.id)

            tagged = event.metadata.get("order_id")
            if tagged is not None and tagged != str(order.id):
                bound.warning(
                    "payment_order_mismatch",
                    order_id=order.id,
                    tagged_order_id=tagged,
                )
                return WebhookResult(200, ORDER_MISMATCH, order.id)

            if not order.mark_paid(event.settlement_reference):
                bound.info("payment_event_replayed", order_id=order.id)
                return WebhookResult(200, DUPLICATE, order.id)

            uow.orders.save(order)
            uow.commit()

        bound.info(
            "payment_confirmed",
            order_id=order.id,
            settlement_reference=order.settlement_reference,
        )
        return WebhookResult(200, APPLIED, order.id)
