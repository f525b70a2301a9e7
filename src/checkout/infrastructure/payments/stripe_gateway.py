"""Stripe implementation of the PaymentGateway port.

Intents are created through a ``stripe.StripeClient`` whose HTTP client
has a hard timeout, with an idempotency key derived from the order's
checkout token: a retried call cannot create a second intent, and a
later order never collides with an abandoned one.  Webhook deliveries are
verified with ``stripe.WebhookSignature`` before the JSON is trusted.
"""

from __future__ import annotations

import json
from typing import Any

import stripe
import structlog

from checkout.domain.exceptions import SignatureInvalid, UpstreamChannelFailure
from checkout.domain.model.order import Order
from checkout.domain.service.payment_gateway import PaymentEvent, PaymentGateway, PaymentIntent

log = structlog.get_logger(__name__)


class StripePaymentGateway(PaymentGateway):

    def __init__(
        self,
        secret_key: str,
        webhook_secret: str,
        currency: str = "pkr",
        timeout: float = 10.0,
        tolerance: int = 300,
        client: Any = None,
    ) -> None:
        self._webhook_secret = webhook_secret
        self._tolerance = tolerance
        self._currency = currency
        self._client = client or stripe.StripeClient(
            secret_key,
            http_client=stripe.RequestsClient(timeout=timeout),
            max_network_retries=1,
        )

    def create_intent(self, order: Order) -> PaymentIntent:
        params = {
            "amount": order.total.minor_units,
            "currency": self._currency,
            "automatic_payment_methods": {"enabled": True},
            "metadata": {"order_id": str(order.id)},
            "description": f"Order #{order.id}",
        }
        try:
            intent = self._client.payment_intents.create(
                params=params,
                options={"idempotency_key": f"checkout-{order.checkout_token}"},
            )
        except stripe.StripeError as exc:
            log.error(
                "payment_intent_failed",
                order_id=order.id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise UpstreamChannelFailure(
                f"Payment processor unavailable for order #{order.id}"
            ) from exc

        return PaymentIntent(id=intent.id, client_secret=intent.client_secret)

    def parse_event(self, payload: bytes, signature: str | None) -> PaymentEvent:
        if not signature:
            raise SignatureInvalid("Missing webhook signature")

        text = payload.decode("utf-8") if isinstance(payload, bytes) else payload
        try:
            stripe.WebhookSignature.verify_header(
                text, signature, self._webhook_secret, tolerance=self._tolerance
            )
        except stripe.SignatureVerificationError as exc:
            raise SignatureInvalid("Webhook signature verification failed") from exc

        try:
            event = json.loads(text)
        except ValueError as exc:
            raise SignatureInvalid("Webhook payload is not valid JSON") from exc

        if not isinstance(event, dict):
            raise SignatureInvalid("Webhook payload is not a JSON object")
        return self._to_event(event)

    @staticmethod
    def _to_event(event: dict[str, Any]) -> PaymentEvent:
        data = event.get("data")
        obj = data.get("object") if isinstance(data, dict) else None
        if not isinstance(obj, dict):
            obj = {}
        metadata = obj.get("metadata")
        if not isinstance(metadata, dict):
            metadata = {}
        is_intent = obj.get("object") == "payment_intent"
        amount = obj.get("amount_received") or obj.get("amount")
        charge = obj.get("latest_charge")
        return PaymentEvent(
            id=str(event.get("id", "")),
            type=str(event.get("type", "")),
            intent_id=obj.get("id") if is_intent else None,
            amount_minor=int(amount) if isinstance(amount, int) else None,
            charge_id=charge if isinstance(charge, str) else None,
            metadata={str(k): str(v) for k, v in metadata.items()},
        )
