"""Domain service: Fulfillment Dispatcher.

Both hand-off channels implement one contract, ``initiate(order) ->
ChannelHandle``, so the checkout pipeline never branches on the channel:

* ``ProcessorChannel`` creates a card-payment intent and stores its id on
  the order; payment is confirmed later by the processor's webhook.
* ``ManualConfirmationChannel`` renders a merchant message and deep link;
  the merchant confirms out of band and an operator updates the status.

``initiate`` only mutates the in-memory order; the order writer persists
what it recorded.  A ``remote`` channel calls an outside service, so the
writer commits the order before initiating and never holds a transaction
open across the call.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

import structlog

from checkout.domain.exceptions import InvalidPaymentSelector
from checkout.domain.model.order import Order, OrderStatus
from checkout.domain.service.order_message import MessageSettings, deep_link, render_order_message
from checkout.domain.service.payment_gateway import PaymentGateway

log = structlog.get_logger(__name__)

CARD = "card"
MANUAL_METHODS = ("cod", "easypaisa", "jazzcash", "bank")


@dataclass(frozen=True)
class ChannelHandle:
    """What the client needs to finish the hand-off."""

    channel: str
    client_secret: str | None = None
    payment_reference: str | None = None
    message_url: str | None = None
    message: str | None = None

    def as_dict(self) -> dict[str, str]:
        if self.channel == ProcessorChannel.name:
            return {"channel": self.channel, "client_secret": self.client_secret or ""}
        return {
            "channel": self.channel,
            "message_url": self.message_url or "",
            "message": self.message or "",
        }


class FulfillmentChannel(ABC):
    """Hand-off contract.

    Confirmation is not part of it: processor payments are confirmed by
    ``ConfirmPaymentHandler`` and manual orders by ``UpdateOrderStatusHandler``.
    """

    name: str
    initial_status: OrderStatus
    remote: bool = False

    @abstractmethod
    def initiate(self, order: Order) -> ChannelHandle:
        """Start the hand-off for a freshly written order."""


class ProcessorChannel(FulfillmentChannel):

    name = "processor"
    initial_status = OrderStatus.PENDING
    remote = True

    def __init__(self, gateway: PaymentGateway) -> None:
        self._gateway = gateway

    def initiate(self, order: Order) -> ChannelHandle:
        intent = self._gateway.create_intent(order)
        order.attach_payment_reference(intent.id)
        log.info("payment_intent_created", order_id=order.id, intent_id=intent.id)
        return ChannelHandle(
            channel=self.name,
            client_secret=intent.client_secret,
            payment_reference=intent.id,
        )


class ManualConfirmationChannel(FulfillmentChannel):

    name = "manual"
    initial_status = OrderStatus.PENDING_MANUAL_CONFIRMATION

    def __init__(self, settings: MessageSettings | None = None) -> None:
        self._settings = settings or MessageSettings()

    def initiate(self, order: Order) -> ChannelHandle:
        message = render_order_message(order, self._settings.store_name)
        url = deep_link(message, self._settings.recipient, self._settings.link_base)
        order.mark_handed_off()
        log.info("manual_message_prepared", order_id=order.id)
        return ChannelHandle(channel=self.name, message_url=url, message=message)


class FulfillmentDispatcher:
    """Picks the channel for a payment-method selector."""

    def __init__(
        self,
        manual: FulfillmentChannel,
        processor: FulfillmentChannel | None = None,
    ) -> None:
        self._manual = manual
        self._processor = processor

    def select(self, payment_method: str) -> FulfillmentChannel:
        if payment_method == CARD:
            if self._processor is None:
                raise InvalidPaymentSelector(payment_method)
            return self._processor
        if payment_method in MANUAL_METHODS:
            return self._manual
        raise InvalidPaymentSelector(payment_method)

    @staticmethod
    def normalize(payment_method: str | None) -> str:
        return (payment_method or "cod").strip().lower()
