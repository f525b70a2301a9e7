"""Order aggregate: the core of the domain.

The Order is an aggregate root that owns its line items.  Totals are
computed once at checkout and frozen on the order; only the status axes
and the payment references change afterwards.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from checkout.domain.exceptions import (
    InvalidStatusTransition,
    InvalidStatusValue,
    ValidationError,
)
from checkout.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    PENDING = "pending"
    PENDING_MANUAL_CONFIRMATION = "pending_manual_confirmation"
    CONFIRMED = "confirmed"
    DISPATCHED = "dispatched"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @staticmethod
    def parse(value: str) -> OrderStatus:
        try:
            return OrderStatus(value)
        except ValueError:
            raise InvalidStatusValue("status", value) from None


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"

    @staticmethod
    def parse(value: str) -> PaymentStatus:
        try:
            return PaymentStatus(value)
        except ValueError:
            raise InvalidStatusValue("payment_status", value) from None


_INITIAL = (OrderStatus.PENDING, OrderStatus.PENDING_MANUAL_CONFIRMATION)

# Forward transitions; CANCELLED is handled separately.
_NEXT: dict[OrderStatus, OrderStatus] = {
    OrderStatus.PENDING: OrderStatus.CONFIRMED,
    OrderStatus.PENDING_MANUAL_CONFIRMATION: OrderStatus.CONFIRMED,
    OrderStatus.CONFIRMED: OrderStatus.DISPATCHED,
    OrderStatus.DISPATCHED: OrderStatus.DELIVERED,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_token() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Customer:
    """Snapshot of who placed the order and where it ships."""

    name: str
    phone: str
    city: str
    address: str
    user_id: int | None = None

    @staticmethod
    def create(
        name: str | None,
        phone: str | None,
        city: str | None,
        address: str | None,
        user_id: int | None = None,
    ) -> Customer:
        fields = {"name": name, "phone": phone, "city": city, "address": address}
        for label, value in fields.items():
            if not value or not value.strip():
                raise ValidationError(f"Customer {label} is required")
        return Customer(
            name=name.strip(),  # type: ignore[union-attr]
            phone=phone.strip(),  # type: ignore[union-attr]
            city=city.strip(),  # type: ignore[union-attr]
            address=address.strip(),  # type: ignore[union-attr]
            user_id=user_id,
        )


@dataclass(frozen=True)
class OrderLineItem:
    """Captures the price snapshot of a product at order-creation time.

    Immutable: later catalog changes never alter a historical order.
    """

    product_id: int
    product_name: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Money
    shipping_fee: Money
    surcharge: Money
    discount: Money
    total: Money

    @property
    def free_shipping(self) -> bool:
        return self.shipping_fee.is_zero


@dataclass
class Order:
    """Aggregate root for checkout orders.

    Use ``Order.create()`` for new orders.  The ``__init__`` is
    intentionally simple so repositories can reconstitute persisted
    orders without re-validating.
    """

    id: int | None
    customer: Customer
    items: list[OrderLineItem]
    totals: OrderTotals
    payment_method: str
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    gift_wrapping: str = "none"
    gift_message: str | None = None
    notes: str | None = None
    payment_reference: str | None = None
    settlement_reference: str | None = None
    paid_at: datetime | None = None
    handed_off_at: datetime | None = None
    # Unique per checkout attempt; keys the processor call.
    checkout_token: str = field(default_factory=_new_token)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        customer: Customer,
        items: list[OrderLineItem],
        totals: OrderTotals,
        payment_method: str,
        initial_status: OrderStatus,
        gift_wrapping: str = "none",
        gift_message: str | None = None,
        notes: str | None = None,
    ) -> Order:
        """Create a new order, enforcing all invariants."""
        if not items:
            raise ValidationError("Order must contain at least one item")
        if initial_status not in _INITIAL:
            raise ValidationError(f"{initial_status.value} is not a starting status")

        subtotal = Money.zero(totals.subtotal.currency)
        for item in items:
            subtotal = subtotal + item.line_total
        if subtotal != totals.subtotal:
            raise ValidationError(
                f"Subtotal {totals.subtotal} does not match line items ({subtotal})"
            )

        return Order(
            id=None,
            customer=customer,
            items=list(items),
            totals=totals,
            payment_method=payment_method,
            status=initial_status,
            gift_wrapping=gift_wrapping,
            gift_message=(gift_message or "").strip() or None,
            notes=(notes or "").strip() or None,
        )

    # --- State transitions ----------------------------------------------------

    def transition_to(self, new_status: OrderStatus) -> bool:
        """Move along ``pending* -> confirmed -> dispatched -> delivered``.

        ``cancelled`` is reachable from any state before ``delivered``.
        Returns False when the order already has ``new_status``.
        """
        if new_status == self.status:
            return False
        allowed = new_status == _NEXT.get(self.status) or (
            new_status == OrderStatus.CANCELLED
            and self.status not in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)
        )
        if not allowed:
            raise InvalidStatusTransition(
                f"Cannot move order #{self.id} from {self.status.value} "
                f"to {new_status.value}"
            )
        self.status = new_status
        self.updated_at = _utcnow()
        return True

    def set_payment_status(self, payment_status: PaymentStatus) -> bool:
        """Operator override of the payment axis. Returns False if unchanged."""
        if payment_status == self.payment_status:
            return False
        self.payment_status = payment_status
        if payment_status == PaymentStatus.PAID and self.paid_at is None:
            self.paid_at = _utcnow()
        self.updated_at = _utcnow()
        return True

    def attach_payment_reference(self, reference: str) -> None:
        """Record the processor's intent id. Set at most once."""
        if self.payment_reference is not None and self.payment_reference != reference:
            raise ValidationError(
                f"Order #{self.id} already has payment reference {self.payment_reference}"
            )
        self.payment_reference = reference

    def mark_paid(self, settlement_reference: str) -> bool:
        """Apply a processor settlement.

        Idempotent: an order that is already paid is left untouched and
        False is returned.  A still-pending order advances to confirmed.
        """
        if self.payment_status == PaymentStatus.PAID:
            return False
        if self.payment_status == PaymentStatus.REFUNDED:
            raise InvalidStatusTransition(
                f"Order #{self.id} was refunded; refusing late settlement"
            )
        self.payment_status = PaymentStatus.PAID
        self.settlement_reference = settlement_reference
        self.paid_at = _utcnow()
        if self.status == OrderStatus.PENDING:
            self.status = OrderStatus.CONFIRMED
        self.updated_at = _utcnow()
        return True

    def mark_handed_off(self) -> None:
        self.handed_off_at = _utcnow()

    # --- Computed properties --------------------------------------------------

    @property
    def total(self) -> Money:
        return self.totals.total
