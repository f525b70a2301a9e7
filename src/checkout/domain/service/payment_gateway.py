"""Port for the card-payment processor.

The domain only needs two things from the processor: create a payment
intent for an order, and turn a signed webhook delivery into a verified
event.  The Stripe adapter lives in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from checkout.domain.model.order import Order

PAYMENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_FAILED = "payment_intent.payment_failed"


@dataclass(frozen=True)
class PaymentIntent:
    id: str
    client_secret: str


@dataclass(frozen=True)
class PaymentEvent:
    """A verified processor event, reduced to what confirmation needs."""

    id: str
    type: str
    intent_id: str | None
    amount_minor: int | None = None
    charge_id: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def settlement_reference(self) -> str:
        return self.charge_id or self.id


class PaymentGateway(ABC):

    @abstractmethod
    def create_intent(self, order: Order) -> PaymentIntent:
        """Create a payment intent for ``order.total`` tagged with the order id.

        Raises UpstreamChannelFailure on any processor error or timeout.
        """

    @abstractmethod
    def parse_event(self, payload: bytes, signature: str | None) -> PaymentEvent:
        """Verify and decode a webhook delivery.

        Raises SignatureInvalid when the signature does not match.
        """
