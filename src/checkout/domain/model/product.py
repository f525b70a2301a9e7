"""Product aggregate.

Products live independently of orders and are owned by the catalog.
Checkout only reads them, apart from the conditional stock decrement
performed while an order is written.
"""

from __future__ import annotations

from dataclasses import dataclass

from checkout.domain.exceptions import ValidationError
from checkout.domain.model.value_objects import Money


@dataclass
class Product:
    """A product in the catalog."""

    id: int
    name: str
    price: Money
    stock: int = 0
    sale_price: Money | None = None
    is_active: bool = True

    def __post_init__(self) -> None:
        if self.stock < 0:
            raise ValidationError(f"Stock for {self.name} cannot be negative")

    @property
    def effective_price(self) -> Money:
        """The sale price when it undercuts the list price, else the list price."""
        if self.sale_price is not None and self.sale_price < self.price:
            return self.sale_price
        return self.price

    def update_price(self, new_price: Money) -> None:
        """Change the list price.

        This does NOT affect any existing orders because orders
        capture a price snapshot at creation time.
        """
        if new_price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")
        self.price = new_price


@dataclass(frozen=True)
class PricedProduct:
    """Authoritative pricing and stock for one product, as seen at checkout."""

    product_id: int
    name: str
    unit_price: Money
    effective_price: Money
    stock: int
    is_active: bool

    @staticmethod
    def from_product(product: Product) -> PricedProduct:
        return PricedProduct(
            product_id=product.id,
            name=product.name,
            unit_price=product.price,
            effective_price=product.effective_price,
            stock=product.stock,
            is_active=product.is_active,
        )
