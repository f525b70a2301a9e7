"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions, and the store handle is
passed explicitly to every handler (there is no global connection).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url

from checkout.application.confirm_payment import ConfirmPaymentHandler
from checkout.application.create_order import CreateOrderHandler
from checkout.application.list_products import ListProductsHandler
from checkout.application.show_order import ShowOrderHandler
from checkout.application.update_order_status import UpdateOrderStatusHandler
from checkout.domain.model.product import Product
from checkout.domain.model.value_objects import Money
from checkout.domain.repository.unit_of_work import UnitOfWork, UnitOfWorkFactory
from checkout.domain.service.fulfillment import (
    FulfillmentDispatcher,
    ManualConfirmationChannel,
    ProcessorChannel,
)
from checkout.domain.service.payment_gateway import PaymentGateway
from checkout.domain.service.total_calculator import TotalCalculator
from checkout.infrastructure.config import CheckoutSettings
from checkout.infrastructure.payments.stripe_gateway import StripePaymentGateway
from checkout.infrastructure.persistence.database import (
    create_database_engine,
    create_schema,
    create_session_factory,
)
from checkout.infrastructure.persistence.sql_unit_of_work import SqlUnitOfWork


@dataclass
class Services:
    settings: CheckoutSettings
    engine: Engine
    uow_factory: UnitOfWorkFactory
    gateway: PaymentGateway | None

    def create_order_handler(self) -> CreateOrderHandler:
        return CreateOrderHandler(
            uow_factory=self.uow_factory,
            dispatcher=self.dispatcher(),
            calculator=TotalCalculator(self.settings.pricing_rules()),
        )

    def confirm_payment_handler(self) -> ConfirmPaymentHandler:
        if self.gateway is None:
            raise RuntimeError(
                "Card payments are not configured: set CHECKOUT_STRIPE_SECRET_KEY "
                "and CHECKOUT_STRIPE_WEBHOOK_SECRET"
            )
        return ConfirmPaymentHandler(self.uow_factory, self.gateway)

    def update_status_handler(self) -> UpdateOrderStatusHandler:
        return UpdateOrderStatusHandler(self.uow_factory)

    def show_order_handler(self) -> ShowOrderHandler:
        return ShowOrderHandler(self.uow_factory)

    def list_products_handler(self) -> ListProductsHandler:
        return ListProductsHandler(self.uow_factory)

    def dispatcher(self) -> FulfillmentDispatcher:
        processor = ProcessorChannel(self.gateway) if self.gateway is not None else None
        return FulfillmentDispatcher(
            manual=ManualConfirmationChannel(self.settings.message_settings()),
            processor=processor,
        )


def build_services(settings: CheckoutSettings | None = None) -> Services:
    settings = settings or CheckoutSettings.from_env()
    _ensure_sqlite_directory(settings.database_url)

    engine = create_database_engine(settings.database_url, timeout=settings.store_timeout)
    create_schema(engine)
    session_factory = create_session_factory(engine)

    def uow_factory() -> UnitOfWork:
        return SqlUnitOfWork(session_factory)

    return Services(
        settings=settings,
        engine=engine,
        uow_factory=uow_factory,
        gateway=payment_gateway(settings),
    )


def payment_gateway(settings: CheckoutSettings) -> PaymentGateway | None:
    if not settings.processor_enabled:
        return None
    return StripePaymentGateway(
        secret_key=settings.stripe_secret_key,  # type: ignore[arg-type]
        webhook_secret=settings.stripe_webhook_secret,  # type: ignore[arg-type]
        currency=settings.processor_currency,
        timeout=settings.processor_timeout,
    )


def load_catalog(uow_factory: UnitOfWorkFactory, seed_file: Path, currency: str = "PKR") -> int:
    """Load products from a JSON list into the store. Returns the count."""
    records = json.loads(seed_file.read_text(encoding="utf-8"))
    with uow_factory() as uow:
        for raw in records:
            sale = raw.get("sale_price")
            uow.products.save(
                Product(
                    id=raw.get("id", 0),
                    name=raw["name"],
                    price=Money.of(raw["price"], currency),
                    sale_price=Money.of(sale, currency) if sale is not None else None,
                    stock=int(raw.get("stock", 0)),
                    is_active=bool(raw.get("is_active", True)),
                )
            )
        uow.commit()
    return len(records)


def _ensure_sqlite_directory(database_url: str) -> None:
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
