"""Abstract unit of work: one atomic transaction over the repositories.

Usage::

    with uow_factory() as uow:
        uow.products.reserve_stock(...)
        uow.orders.add(...)
        uow.commit()

Leaving the block without ``commit()`` (normally or through an
exception) rolls everything back.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from checkout.domain.repository.order_repository import OrderRepository
from checkout.domain.repository.product_repository import ProductRepository


class UnitOfWork(ABC):

    products: ProductRepository
    orders: OrderRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.rollback()
        self.close()

    @abstractmethod
    def commit(self) -> None:
        """Make every write of this unit durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard uncommitted writes. Safe to call after commit."""

    def close(self) -> None:
        """Release the underlying connection, if any."""


UnitOfWorkFactory = Callable[[], UnitOfWork]
