"""Domain service: Cart Validator.

Turns raw cart lines into priced, snapshot line items, checking every
line against the price authority's view of the catalog.  Fails fast on
the first bad line so no partial order can ever be built.
"""

from __future__ import annotations

from checkout.domain.exceptions import EmptyCart, InsufficientStock, ProductUnavailable
from checkout.domain.model.cart import CartLine
from checkout.domain.model.order import OrderLineItem
from checkout.domain.model.product import PricedProduct
from checkout.domain.model.value_objects import Quantity


def requested_product_ids(lines: list[CartLine]) -> set[int]:
    """Product ids worth looking up; unparseable ids are left out."""
    return {line.product_key for line in lines if line.product_key is not None}


class CartValidator:

    @staticmethod
    def ensure_not_empty(lines: list[CartLine]) -> None:
        if not lines:
            raise EmptyCart()

    def validate(
        self,
        lines: list[CartLine],
        catalog: dict[int, PricedProduct],
    ) -> list[OrderLineItem]:
        """Validate each line in order and build snapshot line items.

        The same product on several lines is checked against its
        cumulative requested quantity.
        """
        self.ensure_not_empty(lines)

        items: list[OrderLineItem] = []
        requested: dict[int, int] = {}

        for line in lines:
            key = line.product_key
            if key is None or key not in catalog:
                raise ProductUnavailable(line.product_id)
            product = catalog[key]

            qty = Quantity.coerce(line.quantity)
            requested[key] = requested.get(key, 0) + qty.value
            if product.stock < requested[key]:
                raise InsufficientStock(product.name, product.stock)

            items.append(
                OrderLineItem(
                    product_id=product.product_id,
                    product_name=product.name,
                    quantity=qty,
                    unit_price=product.effective_price,  # <-- price snapshot
                )
            )

        return items
