"""CLI command for replaying payment processor webhook deliveries."""

from __future__ import annotations

import click

from checkout.domain.exceptions import DomainException
from checkout.infrastructure.bootstrap import build_services
from checkout.infrastructure.config import CheckoutSettings


@click.command("receive")
@click.option("--payload", "payload_file", required=True, type=click.File("rb"),
              help="File holding the raw event body.")
@click.option("--signature", required=True, help="Value of the Stripe-Signature header.")
@click.pass_obj
def webhook_receive(settings: CheckoutSettings, payload_file, signature: str) -> None:
    """Verify and apply a signed payment event."""
    try:
        services = build_services(settings)
        if services.gateway is None:
            raise click.ClickException(
                "Card payments are not configured: set CHECKOUT_STRIPE_SECRET_KEY "
                "and CHECKOUT_STRIPE_WEBHOOK_SECRET"
            )
        result = services.confirm_payment_handler().receive(payload_file.read(), signature)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    suffix = f" (order #{result.order_id})" if result.order_id is not None else ""
    if result.status_code >= 400:
        raise click.ClickException(f"{result.status_code} {result.outcome}{suffix}")
    click.echo(f"{result.status_code} {result.outcome}{suffix}")
