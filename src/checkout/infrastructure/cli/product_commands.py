"""CLI commands for the Product aggregate."""

from __future__ import annotations

import click

from checkout.domain.exceptions import DomainException
from checkout.infrastructure.bootstrap import build_services
from checkout.infrastructure.config import CheckoutSettings


@click.command("list")
@click.pass_obj
def product_list(settings: CheckoutSettings) -> None:
    """List all products in the catalog."""
    try:
        products = build_services(settings).list_products_handler().handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<28} {'Price':>12} {'Charged':>12} {'Stock':>6}")
    click.echo("-" * 68)
    for p in products:
        name = p.name if p.is_active else f"{p.name} (inactive)"
        click.echo(
            f"{p.id:<6} {name:<28} {p.price:>12} {p.effective_price:>12} {p.stock:>6}"
        )
