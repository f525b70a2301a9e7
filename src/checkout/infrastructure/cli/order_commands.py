"""CLI commands for the Order aggregate."""

from __future__ import annotations

import json
from decimal import Decimal

import click

from checkout.application.dto import CheckoutRequest, SummaryDTO
from checkout.domain.exceptions import DomainException
from checkout.domain.model.cart import CartLine
from checkout.domain.model.identity import ADMIN, Identity
from checkout.infrastructure.bootstrap import build_services
from checkout.infrastructure.config import CheckoutSettings


def _parse_items(raw: str) -> list[CartLine]:
    """Parse '1:3,4:1' into CartLine list."""
    lines: list[CartLine] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductId:Quantity'."
            )
        product_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        lines.append(CartLine(product_id=product_id.strip(), quantity=qty))
    return lines


def _echo_error_json(exc: DomainException) -> None:
    """Print the error body with its HTTP-style status, then exit 1."""
    status, body = exc.to_response()
    click.echo(json.dumps({"status": status, **body}, indent=2))
    raise click.exceptions.Exit(1)


def _display_summary(summary: SummaryDTO) -> None:
    """Shared formatting for an order's line items and totals."""
    click.echo(f"  {'Product':<28} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*56}")
    for item in summary.items:
        click.echo(
            f"  {item.product_name:<28} {item.quantity:>5} {item.unit_price:>10} {item.line_total:>10}"
        )
    click.echo(f"  {'-'*56}")
    click.echo(f"  {'Subtotal':<28} {summary.subtotal:>27}")
    delivery = "FREE" if summary.free_shipping else summary.shipping_fee
    click.echo(f"  {'Delivery':<28} {delivery:>27}")
    if Decimal(summary.surcharge):
        click.echo(f"  {'Gift wrapping':<28} {summary.surcharge:>27}")
    if Decimal(summary.discount):
        click.echo(f"  {'Discount':<28} {'-' + summary.discount:>27}")
    click.echo(f"  {'Order Total':<28} {summary.total_display:>27}")


@click.command("create")
@click.option("--customer", required=True, help="Customer name.")
@click.option("--phone", required=True, help="Customer phone number.")
@click.option("--city", required=True, help="Delivery city.")
@click.option("--address", required=True, help="Delivery address.")
@click.option("--items", required=True, help="Items as 'ProductId:Qty,ProductId:Qty'.")
@click.option("--payment-method", default="cod", show_default=True,
              help="cod, easypaisa, jazzcash, bank or card.")
@click.option("--gift-wrapping", default="none", show_default=True,
              help="none, standard or premium.")
@click.option("--gift-message", default=None, help="Message for the gift card.")
@click.option("--notes", default=None, help="Delivery notes.")
@click.option("--user-id", type=int, default=None, help="Account placing the order.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the raw response, or the error body on failure.")
@click.pass_obj
def order_create(
    settings: CheckoutSettings,
    customer: str,
    phone: str,
    city: str,
    address: str,
    items: str,
    payment_method: str,
    gift_wrapping: str,
    gift_message: str | None,
    notes: str | None,
    user_id: int | None,
    as_json: bool,
) -> None:
    """Check out a cart and hand the order to its payment channel."""
    request = CheckoutRequest(
        customer_name=customer,
        customer_phone=phone,
        customer_city=city,
        customer_address=address,
        items=_parse_items(items),
        payment_method=payment_method,
        gift_wrapping=gift_wrapping,
        gift_message=gift_message,
        notes=notes,
    )
    identity = Identity(id=user_id) if user_id is not None else None

    try:
        handler = build_services(settings).create_order_handler()
        response = handler.handle(request, identity=identity)
    except DomainException as exc:
        if as_json:
            _echo_error_json(exc)
        raise click.ClickException(str(exc))

    if as_json:
        click.echo(json.dumps(response.as_dict(), indent=2))
        return

    click.echo(f"Order #{response.order_id} created")
    click.echo(f"Customer: {customer}")
    click.echo()
    _display_summary(response.summary)
    click.echo()
    if response.handle.get("channel") == "processor":
        click.echo(f"Client secret: {response.handle['client_secret']}")
    else:
        click.echo("Send the order to the merchant:")
        click.echo(response.handle["message_url"])


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
@click.option("--user-id", type=int, default=None, help="View as this customer account.")
@click.pass_obj
def order_show(settings: CheckoutSettings, order_id: int, user_id: int | None) -> None:
    """Show details of an existing order."""
    identity = Identity(id=user_id) if user_id is not None else None

    try:
        dto = build_services(settings).show_order_handler().handle(order_id, identity=identity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id}  (status={dto.status}, payment={dto.payment_status})")
    click.echo(f"Customer: {dto.customer_name}  {dto.customer_phone}")
    click.echo(f"Ship to:  {dto.customer_address}, {dto.customer_city}")
    click.echo(f"Payment:  {dto.payment_method}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo()
    _display_summary(dto.summary)


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to update.")
@click.option("--status", default=None, help="New order status.")
@click.option("--payment-status", default=None, help="New payment status.")
@click.option("--operator-id", type=int, default=1, show_default=True,
              help="Admin account performing the update.")
@click.pass_obj
def order_status(
    settings: CheckoutSettings,
    order_id: int,
    status: str | None,
    payment_status: str | None,
    operator_id: int,
) -> None:
    """Update an order's status and/or payment status (admin)."""
    operator = Identity(id=operator_id, role=ADMIN)

    try:
        dto = build_services(settings).update_status_handler().handle(
            operator, order_id, status=status, payment_status=payment_status
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id}  status={dto.status}  payment={dto.payment_status}")
