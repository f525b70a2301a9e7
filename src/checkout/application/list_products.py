"""Application service: List Products use case (query)."""

from __future__ import annotations

from dataclasses import dataclass

from checkout.domain.repository.unit_of_work import UnitOfWorkFactory


@dataclass(frozen=True)
class ProductLineDTO:
    id: int
    name: str
    price: str
    effective_price: str
    stock: int
    is_active: bool


class ListProductsHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self) -> list[ProductLineDTO]:
        with self._uow_factory() as uow:
            products = uow.products.list_all()
        return [
            ProductLineDTO(
                id=p.id,
                name=p.name,
                price=str(p.price),
                effective_price=str(p.effective_price),
                stock=p.stock,
                is_active=p.is_active,
            )
            for p in products
        ]
