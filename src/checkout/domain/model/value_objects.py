"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from checkout.domain.exceptions import ValidationError

DEFAULT_CURRENCY = "PKR"


@dataclass(frozen=True)
class Money:
    """Monetary amount with currency.

    Uses Decimal to avoid floating-point rounding errors that would be
    unacceptable in financial calculations.  Amounts are never negative;
    callers that need a floor at zero use ``minus_floor``.
    """

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if not self.amount.is_finite():
            raise ValidationError(f"Money amount must be finite, got {self.amount}")
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        result = self.amount - other.amount
        if result < Decimal("0"):
            raise ValidationError("Money subtraction would result in a negative amount")
        return Money(result, self.currency)

    def __mul__(self, factor: int) -> Money:
        if not isinstance(factor, int) or isinstance(factor, bool):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor, self.currency)

    def __lt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount >= other.amount

    def minus_floor(self, other: Money) -> Money:
        """Subtract, clamping the result at zero."""
        self._assert_same_currency(other)
        if other.amount >= self.amount:
            return Money.zero(self.currency)
        return Money(self.amount - other.amount, self.currency)

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    @property
    def minor_units(self) -> int:
        """Amount in the smallest currency unit (paisa, cents), e.g. for processors."""
        minor = self.amount * 100
        if minor != minor.to_integral_value():
            raise ValidationError(
                f"{self.amount} {self.currency} has sub-minor-unit precision"
            )
        return int(minor)

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        if self.amount == self.amount.to_integral_value():
            return f"Rs. {self.amount:,.0f}"
        return f"Rs. {self.amount:,.2f}"

    # --- Internal helpers -----------------------------------------------------

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def of(amount: str | int | Decimal, currency: str = DEFAULT_CURRENCY) -> Money:
        """Convenient factory that coerces to Decimal safely."""
        try:
            return Money(Decimal(str(amount)), currency)
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @staticmethod
    def zero(currency: str = DEFAULT_CURRENCY) -> Money:
        return Money(Decimal("0"), currency)


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot order zero or negative items.
    """

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)

    @staticmethod
    def coerce(raw: object) -> Quantity:
        """Lenient parse of a client-supplied quantity.

        Non-numeric, zero or negative input becomes 1; fractional input
        is truncated (and still floored at 1).
        """
        if isinstance(raw, bool):
            return Quantity(1)
        try:
            value = int(raw)  # type: ignore[call-overload]
        except (TypeError, ValueError):
            try:
                value = int(float(raw))  # type: ignore[arg-type]
            except (TypeError, ValueError, OverflowError):
                value = 1
        except OverflowError:
            value = 1
        return Quantity(max(1, value))
