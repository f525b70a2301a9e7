"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from checkout.domain.model.order import Order, OrderLineItem


class OrderRepository(ABC):

    @abstractmethod
    def add(self, order: Order) -> int:
        """Insert the order header, assign and return its generated ID."""

    @abstractmethod
    def add_item(self, order_id: int, item: OrderLineItem) -> None:
        """Insert one line item belonging to ``order_id``."""

    @abstractmethod
    def remove(self, order_id: int) -> None:
        """Delete an order and its items. Raises OrderNotFound if absent."""

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order (with its items) by ID, or None if not found."""

    @abstractmethod
    def get_by_payment_reference(self, reference: str) -> Order | None:
        """Return the order carrying the processor's intent id, or None."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist the mutable fields of an existing order.

        Raises DuplicateExternalReference if the payment reference is
        already attached to another order.
        """
