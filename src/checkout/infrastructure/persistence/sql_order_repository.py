"""SQLAlchemy implementation of OrderRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from checkout.domain.exceptions import OrderNotFound
from checkout.domain.model.order import (
    Customer,
    Order,
    OrderLineItem,
    OrderStatus,
    OrderTotals,
    PaymentStatus,
)
from checkout.domain.model.value_objects import Money, Quantity
from checkout.domain.repository.order_repository import OrderRepository
from checkout.infrastructure.persistence.database import OrderItemRow, OrderRow
from checkout.infrastructure.persistence.errors import storage_errors


class SqlOrderRepository(OrderRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- OrderRepository interface --------------------------------------------

    def add(self, order: Order) -> int:
        row = self._to_row(order)
        with storage_errors("insert order"):
            self._session.add(row)
            self._session.flush()
        return row.id

    def add_item(self, order_id: int, item: OrderLineItem) -> None:
        row = OrderItemRow(
            order_id=order_id,
            product_id=item.product_id,
            product_name=item.product_name,
            quantity=item.quantity.value,
            currency=item.unit_price.currency,
            unit_price=item.unit_price.amount,
            line_total=item.line_total.amount,
        )
        with storage_errors("insert order item"):
            self._session.add(row)
            self._session.flush()

    def remove(self, order_id: int) -> None:
        with storage_errors("delete order"):
            row = self._session.get(OrderRow, order_id)
            if row is None:
                raise OrderNotFound(order_id)
            self._session.delete(row)
            self._session.flush()

    def get_by_id(self, order_id: int) -> Order | None:
        with storage_errors("load order"):
            row = self._session.get(OrderRow, order_id)
            return self._to_domain(row) if row is not None else None

    def get_by_payment_reference(self, reference: str) -> Order | None:
        with storage_errors("load order by payment reference"):
            row = self._session.scalars(
                select(OrderRow).where(OrderRow.payment_reference == reference)
            ).first()
            return self._to_domain(row) if row is not None else None

    def save(self, order: Order) -> None:
        with storage_errors("update order"):
            row = self._session.get(OrderRow, order.id)
            if row is None:
                raise OrderNotFound(order.id)  # type: ignore[arg-type]
            row.status = order.status.value
            row.payment_status = order.payment_status.value
            row.payment_reference = order.payment_reference
            row.settlement_reference = order.settlement_reference
            row.paid_at = order.paid_at
            row.handed_off_at = order.handed_off_at
            row.updated_at = order.updated_at
            self._session.flush()

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_row(order: Order) -> OrderRow:
        totals = order.totals
        return OrderRow(
            checkout_token=order.checkout_token,
            customer_name=order.customer.name,
            customer_phone=order.customer.phone,
            customer_city=order.customer.city,
            customer_address=order.customer.address,
            user_id=order.customer.user_id,
            status=order.status.value,
            payment_status=order.payment_status.value,
            payment_method=order.payment_method,
            currency=totals.total.currency,
            subtotal=totals.subtotal.amount,
            shipping_fee=totals.shipping_fee.amount,
            surcharge=totals.surcharge.amount,
            discount=totals.discount.amount,
            total=totals.total.amount,
            gift_wrapping=order.gift_wrapping,
            gift_message=order.gift_message,
            notes=order.notes,
            payment_reference=order.payment_reference,
            settlement_reference=order.settlement_reference,
            paid_at=order.paid_at,
            handed_off_at=order.handed_off_at,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )

    @staticmethod
    def _to_domain(row: OrderRow) -> Order:
        currency = row.currency
        items = [
            OrderLineItem(
                product_id=i.product_id,
                product_name=i.product_name,
                quantity=Quantity(i.quantity),
                unit_price=Money(i.unit_price, i.currency),
            )
            for i in row.items
        ]
        return Order(
            id=row.id,
            customer=Customer(
                name=row.customer_name,
                phone=row.customer_phone,
                city=row.customer_city,
                address=row.customer_address,
                user_id=row.user_id,
            ),
            items=items,
            totals=OrderTotals(
                subtotal=Money(row.subtotal, currency),
                shipping_fee=Money(row.shipping_fee, currency),
                surcharge=Money(row.surcharge, currency),
                discount=Money(row.discount, currency),
                total=Money(row.total, currency),
            ),
            payment_method=row.payment_method,
            status=OrderStatus(row.status),
            payment_status=PaymentStatus(row.payment_status),
            gift_wrapping=row.gift_wrapping,
            gift_message=row.gift_message,
            notes=row.notes,
            payment_reference=row.payment_reference,
            settlement_reference=row.settlement_reference,
            paid_at=row.paid_at,
            handed_off_at=row.handed_off_at,
            checkout_token=row.checkout_token,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
