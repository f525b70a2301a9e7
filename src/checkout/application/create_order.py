"""Application service: Checkout (Create Order) use case.

Orchestrates the pipeline

    cart -> Price Authority -> Cart Validator -> Total Calculator
         -> Order Writer -> Fulfillment channel -> response

Everything up to the Order Writer is read-only, so every validation
error is raised before anything is written.
"""

from __future__ import annotations

from checkout.application.dto import CheckoutRequest, CheckoutResponse, summary_of
from checkout.domain.model.identity import Identity
from checkout.domain.model.order import Customer, Order
from checkout.domain.repository.unit_of_work import UnitOfWorkFactory
from checkout.domain.service.cart_validator import CartValidator, requested_product_ids
from checkout.domain.service.fulfillment import FulfillmentDispatcher
from checkout.domain.service.order_writer import OrderWriter
from checkout.domain.service.price_authority import PriceAuthority
from checkout.domain.service.total_calculator import TotalCalculator


class CreateOrderHandler:

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        dispatcher: FulfillmentDispatcher,
        calculator: TotalCalculator | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._dispatcher = dispatcher
        self._calculator = calculator or TotalCalculator()
        self._validator = CartValidator()
        self._writer = OrderWriter(uow_factory)

    def handle(
        self,
        request: CheckoutRequest,
        identity: Identity | None = None,
    ) -> CheckoutResponse:
        """Check out a cart.

        Steps:
        1. Validate customer fields, cart emptiness and payment selector.
        2. Resolve authoritative prices (client prices never enter).
        3. Validate lines and build snapshot line items.
        4. Compute the frozen totals.
        5. Write the order atomically and hand it to its channel.
        """
        customer = Customer.create(
            name=request.customer_name,
            phone=request.customer_phone,
            city=request.customer_city,
            address=request.customer_address,
            user_id=identity.id if identity is not None else None,
        )
        self._validator.ensure_not_empty(request.items)

        payment_method = FulfillmentDispatcher.normalize(request.payment_method)
        channel = self._dispatcher.select(payment_method)
        gift_wrapping = self._calculator.rules.normalize_wrapping(request.gift_wrapping)

        with self._uow_factory() as uow:
            catalog = PriceAuthority(uow.products).resolve(requested_product_ids(request.items))

        items = self._validator.validate(request.items, catalog)
        totals = self._calculator.calculate(items, gift_wrapping)
        order = Order.create(
            customer=customer,
            items=items,
            totals=totals,
            payment_method=payment_method,
            initial_status=channel.initial_status,
            gift_wrapping=gift_wrapping,
            gift_message=request.gift_message,
            notes=request.notes,
        )
        handle = self._writer.write(order, channel)

        return CheckoutResponse(
            order_id=order.id,  # type: ignore[arg-type]
            summary=summary_of(order),
            handle=handle.as_dict(),
        )
