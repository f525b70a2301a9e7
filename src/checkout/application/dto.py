"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the outer surfaces (CLI, webhook endpoint) and
the application layer without exposing domain internals.  Monetary
amounts leave as decimal strings, never floats.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from checkout.domain.exceptions import ValidationError
from checkout.domain.model.cart import CartLine
from checkout.domain.model.order import Order


@dataclass(frozen=True)
class CheckoutRequest:
    """Input: the checkout form plus the cart.

    Prices are deliberately absent; whatever the client sent is dropped
    by ``from_payload``.
    """

    customer_name: str
    customer_phone: str
    customer_city: str
    customer_address: str
    items: list[CartLine]
    payment_method: str = "cod"
    gift_wrapping: str = "none"
    gift_message: str | None = None
    notes: str | None = None

    @staticmethod
    def from_payload(payload: dict[str, Any]) -> CheckoutRequest:
        raw_items = payload.get("items") or []
        if not isinstance(raw_items, list):
            raise ValidationError("items must be a list")
        items = []
        for raw in raw_items:
            if not isinstance(raw, dict):
                raise ValidationError("Each item must be an object")
            items.append(CartLine(product_id=raw.get("product_id"), quantity=raw.get("quantity", 1)))

        return CheckoutRequest(
            customer_name=_text(payload.get("customer_name")),
            customer_phone=_text(payload.get("customer_phone")),
            customer_city=_text(payload.get("customer_city")),
            customer_address=_text(payload.get("customer_address")),
            items=items,
            payment_method=_text(payload.get("payment_method")) or "cod",
            gift_wrapping=_text(payload.get("gift_wrapping")) or "none",
            gift_message=_text(payload.get("gift_message")) or None,
            notes=_text(payload.get("notes")) or None,
        )


def _text(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"Expected text, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single line item as displayed to the user."""

    product_id: int
    product_name: str
    quantity: int
    unit_price: str
    line_total: str


@dataclass(frozen=True)
class SummaryDTO:
    items: list[OrderLineItemDTO]
    subtotal: str
    shipping_fee: str
    surcharge: str
    discount: str
    total: str
    total_display: str
    free_shipping: bool


@dataclass(frozen=True)
class CheckoutResponse:
    order_id: int
    summary: SummaryDTO
    handle: dict[str, str] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {"order_id": self.order_id, "summary": asdict(self.summary), **self.handle}


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    customer_name: str
    customer_phone: str
    customer_city: str
    customer_address: str
    status: str
    payment_status: str
    payment_method: str
    summary: SummaryDTO
    payment_reference: str | None
    created_at: str


@dataclass(frozen=True)
class WebhookResult:
    """What the webhook endpoint answers the processor with."""

    status_code: int
    outcome: str
    order_id: int | None = None


def summary_of(order: Order) -> SummaryDTO:
    totals = order.totals
    return SummaryDTO(
        items=[
            OrderLineItemDTO(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price.amount),
                line_total=str(item.line_total.amount),
            )
            for item in order.items
        ],
        subtotal=str(totals.subtotal.amount),
        shipping_fee=str(totals.shipping_fee.amount),
        surcharge=str(totals.surcharge.amount),
        discount=str(totals.discount.amount),
        total=str(totals.total.amount),
        total_display=str(totals.total),
        free_shipping=totals.free_shipping,
    )


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        customer_name=order.customer.name,
        customer_phone=order.customer.phone,
        customer_city=order.customer.city,
        customer_address=order.customer.address,
        status=order.status.value,
        payment_status=order.payment_status.value,
        payment_method=order.payment_method,
        summary=summary_of(order),
        payment_reference=order.payment_reference,
        created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
    )
