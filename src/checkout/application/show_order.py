"""Application service: Show Order use case (query)."""

from __future__ import annotations

from checkout.application.dto import OrderDTO, order_to_dto
from checkout.domain.exceptions import Forbidden, OrderNotFound
from checkout.domain.model.identity import Identity
from checkout.domain.repository.unit_of_work import UnitOfWorkFactory


class ShowOrderHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, order_id: int, identity: Identity | None = None) -> OrderDTO:
        """Return an order with its items.

        With an identity, customers only see their own orders; admins see all.
        """
        with self._uow_factory() as uow:
            order = uow.orders.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        if (
            identity is not None
            and not identity.is_admin
            and order.customer.user_id != identity.id
        ):
            raise Forbidden("You can only view your own orders")
        return order_to_dto(order)
