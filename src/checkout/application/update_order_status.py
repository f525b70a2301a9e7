"""Application service: Update Order Status use case (operator action).

Used after the merchant confirms a manual-channel order out of band, and
for the later dispatch/delivery/cancel steps.  Only admins may call it.
Values are checked against the enumerations before the store is touched.
"""

from __future__ import annotations

import structlog

from checkout.application.dto import OrderDTO, order_to_dto
from checkout.domain.exceptions import Forbidden, OrderNotFound, Unauthenticated, ValidationError
from checkout.domain.model.identity import Identity
from checkout.domain.model.order import OrderStatus, PaymentStatus
from checkout.domain.repository.unit_of_work import UnitOfWorkFactory

log = structlog.get_logger(__name__)


class UpdateOrderStatusHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(
        self,
        identity: Identity | None,
        order_id: int,
        status: str | None = None,
        payment_status: str | None = None,
    ) -> OrderDTO:
        if identity is None:
            raise Unauthenticated("Authentication required")
        if not identity.is_admin:
            raise Forbidden("Only admins may update order status")

        new_status = OrderStatus.parse(status) if status else None
        new_payment = PaymentStatus.parse(payment_status) if payment_status else None
        if new_status is None and new_payment is None:
            raise ValidationError("Nothing to update: give status and/or payment_status")

        with self._uow_factory() as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise OrderNotFound(order_id)

            changed = False
            if new_status is not None:
                changed = order.transition_to(new_status) or changed
            if new_payment is not None:
                changed = order.set_payment_status(new_payment) or changed

            if changed:
                uow.orders.save(order)
                uow.commit()

        log.info(
            "order_status_updated",
            order_id=order_id,
            by=identity.id,
            status=order.status.value,
            payment_status=order.payment_status.value,
            changed=changed,
        )
        return order_to_dto(order)
