"""Domain service: Total Calculator.

Derives the frozen order totals from validated line items:

    total = subtotal + shipping_fee + surcharge - discount   (never below 0)

Shipping is free once the subtotal reaches the configured threshold.
The surcharge is the gift-wrapping fee of the selected option.  The
discount comes from a pluggable policy; none is applied by default.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal

from checkout.domain.model.order import OrderLineItem, OrderTotals
from checkout.domain.model.value_objects import DEFAULT_CURRENCY, Money

NO_WRAPPING = "none"


def _default_wrapping_fees() -> dict[str, Money]:
    return {
        NO_WRAPPING: Money.zero(),
        "standard": Money(Decimal("300")),
        "premium": Money(Decimal("600")),
    }


@dataclass(frozen=True)
class PricingRules:
    free_shipping_threshold: Money = Money(Decimal("5000"))
    shipping_fee: Money = Money(Decimal("200"))
    wrapping_fees: dict[str, Money] = field(default_factory=_default_wrapping_fees)
    currency: str = DEFAULT_CURRENCY

    def normalize_wrapping(self, option: str | None) -> str:
        """Unknown or omitted wrapping options mean no wrapping."""
        option = (option or "").strip().lower()
        return option if option in self.wrapping_fees else NO_WRAPPING

    def wrapping_fee(self, option: str | None) -> Money:
        return self.wrapping_fees.get(self.normalize_wrapping(option), Money.zero(self.currency))


class DiscountPolicy(ABC):
    """Extension point for coupon logic."""

    @abstractmethod
    def discount_for(self, items: list[OrderLineItem], subtotal: Money) -> Money:
        """Return the discount to subtract from the order."""


class NoDiscount(DiscountPolicy):

    def discount_for(self, items: list[OrderLineItem], subtotal: Money) -> Money:
        return Money.zero(subtotal.currency)


class TotalCalculator:

    def __init__(
        self,
        rules: PricingRules | None = None,
        discount_policy: DiscountPolicy | None = None,
    ) -> None:
        self._rules = rules or PricingRules()
        self._discount_policy = discount_policy or NoDiscount()

    @property
    def rules(self) -> PricingRules:
        return self._rules

    def calculate(
        self,
        items: list[OrderLineItem],
        gift_wrapping: str | None = None,
    ) -> OrderTotals:
        subtotal = Money.zero(self._rules.currency)
        for item in items:
            subtotal = subtotal + item.line_total

        if subtotal >= self._rules.free_shipping_threshold:
            shipping_fee = Money.zero(self._rules.currency)
        else:
            shipping_fee = self._rules.shipping_fee

        surcharge = self._rules.wrapping_fee(gift_wrapping)
        discount = self._discount_policy.discount_for(items, subtotal)

        gross = subtotal + shipping_fee + surcharge
        return OrderTotals(
            subtotal=subtotal,
            shipping_fee=shipping_fee,
            surcharge=surcharge,
            discount=discount,
            total=gross.minus_floor(discount),
        )
