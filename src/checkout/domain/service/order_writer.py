"""Domain service: Order Writer.

Persists a checked-out order as one atomic unit:

  1. conditionally decrement stock for every product (compare-and-decrement
     in the store, so concurrent checkouts cannot oversell);
  2. insert the order header and let the store assign its id;
  3. insert every line item with its price/name snapshot;
  4. commit.

A local channel (the manual message) initiates before step 4 and its
record is committed with the order.  A remote channel (the card processor)
initiates only after step 4, so no store lock is held during the network
call; what it recorded is saved in a second unit of work.  If the remote
hand-off fails, the order is withdrawn: its rows are deleted and its stock
is released, so the caller sees no order, exactly as for a local failure.
"""

from __future__ import annotations

import structlog

from checkout.domain.exceptions import DomainException, InsufficientStock
from checkout.domain.model.order import Order
from checkout.domain.repository.unit_of_work import UnitOfWork, UnitOfWorkFactory
from checkout.domain.service.fulfillment import ChannelHandle, FulfillmentChannel

log = structlog.get_logger(__name__)


def _quantities(order: Order) -> dict[int, int]:
    quantities: dict[int, int] = {}
    for item in order.items:
        quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity.value
    return quantities


class OrderWriter:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def write(self, order: Order, channel: FulfillmentChannel) -> ChannelHandle:
        if channel.remote:
            with self._uow_factory() as uow:
                self._insert(uow, order)
                uow.commit()
            handle = self._initiate_remote(order, channel)
        else:
            with self._uow_factory() as uow:
                self._insert(uow, order)
                handle = channel.initiate(order)
                uow.orders.save(order)
                uow.commit()

        log.info(
            "order_created",
            order_id=order.id,
            channel=channel.name,
            items=len(order.items),
            total=str(order.total.amount),
        )
        return handle

    def _insert(self, uow: UnitOfWork, order: Order) -> None:
        self._reserve_stock(uow, order)
        order.id = uow.orders.add(order)
        for item in order.items:
            uow.orders.add_item(order.id, item)

    def _initiate_remote(self, order: Order, channel: FulfillmentChannel) -> ChannelHandle:
        try:
            handle = channel.initiate(order)
            with self._uow_factory() as uow:
                uow.orders.save(order)
                uow.commit()
        except DomainException as exc:
            log.warning(
                "order_withdrawn",
                order_id=order.id,
                channel=channel.name,
                reason=type(exc).__name__,
            )
            self._withdraw(order)
            raise
        return handle

    def _withdraw(self, order: Order) -> None:
        with self._uow_factory() as uow:
            uow.orders.remove(order.id)  # type: ignore[arg-type]
            for product_id, quantity in sorted(_quantities(order).items()):
                uow.products.release_stock(product_id, quantity)
            uow.commit()

    @staticmethod
    def _reserve_stock(uow: UnitOfWork, order: Order) -> None:
        quantities = _quantities(order)
        names = {item.product_id: item.product_name for item in order.items}

        # Fixed ordering keeps concurrent writers from locking rows crosswise.
        for product_id in sorted(quantities):
            if not uow.products.reserve_stock(product_id, quantities[product_id]):
                log.info(
                    "stock_reservation_rejected",
                    product_id=product_id,
                    quantity=quantities[product_id],
                )
                raise InsufficientStock(names[product_id])
