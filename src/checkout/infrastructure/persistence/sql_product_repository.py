"""SQLAlchemy implementation of ProductRepository."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from checkout.domain.model.product import Product
from checkout.domain.model.value_objects import Money
from checkout.domain.repository.product_repository import ProductRepository
from checkout.infrastructure.persistence.database import ProductRow
from checkout.infrastructure.persistence.errors import storage_errors


class SqlProductRepository(ProductRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: int) -> Product | None:
        with storage_errors("load product"):
            row = self._session.get(ProductRow, product_id)
        return self._to_domain(row) if row is not None else None

    def get_many(self, product_ids: Iterable[int]) -> list[Product]:
        ids = list(product_ids)
        if not ids:
            return []
        with storage_errors("load products"):
            rows = self._session.scalars(
                select(ProductRow).where(ProductRow.id.in_(ids)).order_by(ProductRow.id)
            ).all()
        return [self._to_domain(row) for row in rows]

    def list_all(self) -> list[Product]:
        with storage_errors("list products"):
            rows = self._session.scalars(select(ProductRow).order_by(ProductRow.id)).all()
        return [self._to_domain(row) for row in rows]

    def save(self, product: Product) -> None:
        with storage_errors("save product"):
            row = self._session.get(ProductRow, product.id) if product.id else None
            if row is None:
                row = ProductRow(id=product.id or None)
                self._session.add(row)
            row.name = product.name
            row.currency = product.price.currency
            row.price = product.price.amount
            row.sale_price = product.sale_price.amount if product.sale_price else None
            row.stock = product.stock
            row.is_active = product.is_active
            self._session.flush()
        product.id = row.id

    def reserve_stock(self, product_id: int, quantity: int) -> bool:
        stmt = (
            update(ProductRow)
            .where(ProductRow.id == product_id, ProductRow.stock >= quantity)
            .values(stock=ProductRow.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        with storage_errors("reserve stock"):
            result = self._session.execute(stmt)
        return result.rowcount == 1

    def release_stock(self, product_id: int, quantity: int) -> None:
        stmt = (
            update(ProductRow)
            .where(ProductRow.id == product_id)
            .values(stock=ProductRow.stock + quantity)
            .execution_options(synchronize_session=False)
        )
        with storage_errors("release stock"):
            self._session.execute(stmt)

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_domain(row: ProductRow) -> Product:
        return Product(
            id=row.id,
            name=row.name,
            price=Money(row.price, row.currency),
            sale_price=Money(row.sale_price, row.currency) if row.sale_price is not None else None,
            stock=row.stock,
            is_active=row.is_active,
        )
