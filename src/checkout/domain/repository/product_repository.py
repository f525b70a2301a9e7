"""Abstract repository for Product aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (SQL, in-memory) live in the
infrastructure layer and in the test fakes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from checkout.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: int) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def get_many(self, product_ids: Iterable[int]) -> list[Product]:
        """Return the products whose ids are in ``product_ids`` (active or not)."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist a new or updated product."""

    @abstractmethod
    def reserve_stock(self, product_id: int, quantity: int) -> bool:
        """Decrement stock by ``quantity`` only if enough remains.

        Must be a single compare-and-decrement against the store.
        Returns False (and changes nothing) when stock is insufficient.
        """

    @abstractmethod
    def release_stock(self, product_id: int, quantity: int) -> None:
        """Give back ``quantity`` units taken by a withdrawn order."""
