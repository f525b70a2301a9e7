"""Cart lines as submitted by the client.

Values are kept raw here; the cart validator is the only place that
interprets them.  Any client-side price is simply not part of the type.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CartLine:
    product_id: object
    quantity: object = 1

    @property
    def product_key(self) -> int | None:
        """The product id as an integer, or None if it cannot be one."""
        if isinstance(self.product_id, bool):
            return None
        if isinstance(self.product_id, int):
            return self.product_id
        if isinstance(self.product_id, float) and self.product_id.is_integer():
            return int(self.product_id)
        if isinstance(self.product_id, str):
            text = self.product_id.strip()
            # ASCII digits only; int() rejects superscripts.
            if text.isascii() and text.isdecimal():
                return int(text)
        return None
