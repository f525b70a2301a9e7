"""Runtime settings, read from ``CHECKOUT_*`` environment variables.

Defaults describe a local SQLite store and the storefront's default pricing
rules, so the CLI works out of the box.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path

from checkout.domain.exceptions import ValidationError
from checkout.domain.model.value_objects import Money
from checkout.domain.service.order_message import MessageSettings
from checkout.domain.service.total_calculator import NO_WRAPPING, PricingRules

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DATA_DIR = Path(__file__).resolve().parents[3] / "data"

_PREFIX = "CHECKOUT_"


@dataclass(frozen=True)
class CheckoutSettings:
    database_url: str = f"sqlite:///{_DATA_DIR / 'checkout.db'}"
    store_timeout: float = 10.0

    store_name: str = "Elegant La Vie"
    merchant_number: str = "923001234567"
    deep_link_base: str = "https://wa.me"

    currency: str = "PKR"
    free_shipping_threshold: Decimal = Decimal("5000")
    shipping_fee: Decimal = Decimal("200")
    wrapping_fees: dict[str, Decimal] = field(
        default_factory=lambda: {"standard": Decimal("300"), "premium": Decimal("600")}
    )

    stripe_secret_key: str | None = None
    stripe_webhook_secret: str | None = None
    processor_currency: str = "pkr"
    processor_timeout: float = 10.0

    log_level: str = "INFO"
    log_json: bool = False

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> CheckoutSettings:
        env = os.environ if environ is None else environ
        defaults = CheckoutSettings()

        def get(name: str, default: str | None = None) -> str | None:
            value = env.get(_PREFIX + name)
            return value if value not in (None, "") else default

        return CheckoutSettings(
            database_url=get("DATABASE_URL", defaults.database_url),  # type: ignore[arg-type]
            store_timeout=_float(get("STORE_TIMEOUT"), defaults.store_timeout),
            store_name=get("STORE_NAME", defaults.store_name),  # type: ignore[arg-type]
            merchant_number=get("MERCHANT_NUMBER", defaults.merchant_number),  # type: ignore[arg-type]
            deep_link_base=get("DEEP_LINK_BASE", defaults.deep_link_base),  # type: ignore[arg-type]
            currency=get("CURRENCY", defaults.currency),  # type: ignore[arg-type]
            free_shipping_threshold=_decimal(
                get("FREE_SHIPPING_THRESHOLD"), defaults.free_shipping_threshold
            ),
            shipping_fee=_decimal(get("SHIPPING_FEE"), defaults.shipping_fee),
            wrapping_fees=_wrapping_fees(get("WRAPPING_FEES"), defaults.wrapping_fees),
            stripe_secret_key=get("STRIPE_SECRET_KEY"),
            stripe_webhook_secret=get("STRIPE_WEBHOOK_SECRET"),
            processor_currency=get("PROCESSOR_CURRENCY", defaults.processor_currency),  # type: ignore[arg-type]
            processor_timeout=_float(get("PROCESSOR_TIMEOUT"), defaults.processor_timeout),
            log_level=(get("LOG_LEVEL", defaults.log_level) or "INFO").upper(),
            log_json=(get("LOG_JSON", "") or "").lower() in ("1", "true", "yes"),
        )

    # --- Domain views ---------------------------------------------------------

    def pricing_rules(self) -> PricingRules:
        fees = {NO_WRAPPING: Money.zero(self.currency)}
        fees.update(
            {name: Money(amount, self.currency) for name, amount in self.wrapping_fees.items()}
        )
        return PricingRules(
            free_shipping_threshold=Money(self.free_shipping_threshold, self.currency),
            shipping_fee=Money(self.shipping_fee, self.currency),
            wrapping_fees=fees,
            currency=self.currency,
        )

    def message_settings(self) -> MessageSettings:
        return MessageSettings(
            store_name=self.store_name,
            recipient=self.merchant_number,
            link_base=self.deep_link_base,
        )

    @property
    def processor_enabled(self) -> bool:
        return bool(self.stripe_secret_key and self.stripe_webhook_secret)


def _float(raw: str | None, default: float) -> float:
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValidationError(f"Invalid number in configuration: {raw!r}") from None


def _decimal(raw: str | None, default: Decimal) -> Decimal:
    if raw is None:
        return default
    return Money.of(raw).amount


def _wrapping_fees(raw: str | None, default: dict[str, Decimal]) -> dict[str, Decimal]:
    """Parse ``standard=300,premium=600``."""
    if raw is None:
        return dict(default)
    fees: dict[str, Decimal] = {}
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        if "=" not in pair:
            raise ValidationError(
                f"Invalid wrapping fee '{pair}'. Expected 'option=amount'."
            )
        name, amount = pair.split("=", 1)
        fees[name.strip().lower()] = Money.of(amount.strip()).amount
    return fees
