"""Domain service: Price Authority.

The single source of price truth at checkout.  Given the product ids a
cart references, returns the authoritative price and stock of every
product that exists and is active.  Missing or inactive products are
simply absent; the cart validator decides what that means.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from checkout.domain.model.product import PricedProduct
from checkout.domain.repository.product_repository import ProductRepository

log = structlog.get_logger(__name__)


class PriceAuthority:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def resolve(self, product_ids: Iterable[int]) -> dict[int, PricedProduct]:
        wanted = sorted(set(product_ids))
        if not wanted:
            return {}

        priced = {
            product.id: PricedProduct.from_product(product)
            for product in self._product_repo.get_many(wanted)
            if product.is_active
        }
        log.debug("prices_resolved", requested=len(wanted), resolved=len(priced))
        return priced
