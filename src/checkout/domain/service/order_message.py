"""Merchant message for manually confirmed orders.

Renders the itemized order summary the merchant receives, and the deep
link that opens a chat with that text already filled in.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

from checkout.domain.model.order import Order

DIVIDER = "----------------------"

PAYMENT_LABELS = {
    "cod": "Cash on Delivery",
    "easypaisa": "EasyPaisa",
    "jazzcash": "JazzCash",
    "bank": "Bank Transfer",
    "card": "Card",
}

WRAPPING_LABELS = {
    "standard": "Standard Gift Box",
    "premium": "Premium Gift Box",
}

# Characters encodeURIComponent leaves alone.
_URI_SAFE = "-_.!~*'()"


@dataclass(frozen=True)
class MessageSettings:
    store_name: str = "Elegant La Vie"
    recipient: str = "923001234567"
    link_base: str = "https://wa.me"


def render_order_message(order: Order, store_name: str) -> str:
    totals = order.totals
    customer = order.customer

    lines: list[str | None] = [
        f"*New Order - {store_name}*",
        DIVIDER,
        f"*Order #{order.id}*",
        "",
        f"Name:    {customer.name}",
        f"Phone:   {customer.phone}",
        f"City:    {customer.city}",
        f"Address: {customer.address}",
        "",
        "*Order Details:*",
    ]
    lines.extend(
        f"  - {item.product_name} x {item.quantity}  ->  {item.line_total}"
        for item in order.items
    )
    lines += [
        "",
        DIVIDER,
        f"Subtotal:  {totals.subtotal}",
        f"Delivery:  {totals.shipping_fee}" if not totals.free_shipping else "Delivery:  *FREE*",
        (
            f"{WRAPPING_LABELS[order.gift_wrapping]} (+{totals.surcharge})"
            if order.gift_wrapping in WRAPPING_LABELS
            else None
        ),
        f"Discount:  -{totals.discount}" if not totals.discount.is_zero else None,
        "",
        f"*Total:  {totals.total}*",
        "",
        f"Payment: {PAYMENT_LABELS.get(order.payment_method, order.payment_method)}",
        f'Gift message: "{order.gift_message}"' if order.gift_message else None,
        f"Note: {order.notes}" if order.notes else None,
        "",
        "_Please confirm this order at your earliest convenience._",
        f"_Order #{order.id} | {order.created_at.strftime('%d %b %Y')}_",
    ]
    return "\n".join(line for line in lines if line is not None)


def deep_link(message: str, recipient: str, link_base: str = "https://wa.me") -> str:
    return f"{link_base.rstrip('/')}/{recipient}?text={quote(message, safe=_URI_SAFE)}"
