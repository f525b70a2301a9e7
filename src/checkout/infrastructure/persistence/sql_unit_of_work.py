"""SQLAlchemy unit of work: one Session, one transaction."""

from __future__ import annotations

from sqlalchemy.orm import Session, sessionmaker

from checkout.domain.repository.unit_of_work import UnitOfWork
from checkout.infrastructure.persistence.errors import storage_errors
from checkout.infrastructure.persistence.sql_order_repository import SqlOrderRepository
from checkout.infrastructure.persistence.sql_product_repository import SqlProductRepository


class SqlUnitOfWork(UnitOfWork):

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session: Session = session_factory()
        self.products = SqlProductRepository(self._session)
        self.orders = SqlOrderRepository(self._session)

    def commit(self) -> None:
        with storage_errors("commit"):
            self._session.commit()

    def rollback(self) -> None:
        self._session.rollback()

    def close(self) -> None:
        self._session.close()
