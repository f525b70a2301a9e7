from dataclasses import replace

import click

from checkout.infrastructure.cli.db_commands import db_init
from checkout.infrastructure.cli.order_commands import order_create, order_show, order_status
from checkout.infrastructure.cli.product_commands import product_list
from checkout.infrastructure.cli.webhook_commands import webhook_receive
from checkout.infrastructure.config import CheckoutSettings
from checkout.infrastructure.log_config import configure_logging


@click.group()
@click.option("--database-url", default=None, help="Override CHECKOUT_DATABASE_URL.")
@click.pass_context
def cli(ctx: click.Context, database_url: str | None) -> None:
    """Checkout: cart to order, with card and manual payment channels"""
    settings = CheckoutSettings.from_env()
    if database_url:
        settings = replace(settings, database_url=database_url)
    configure_logging(settings.log_level, json=settings.log_json)
    ctx.obj = settings


@cli.group()
def db() -> None:
    """Manage the order store."""


@cli.group()
def order() -> None:
    """Check out and manage orders."""


@cli.group()
def product() -> None:
    """Browse the catalog."""


@cli.group()
def webhook() -> None:
    """Feed payment processor events."""


# Register subcommands
db.add_command(db_init)
order.add_command(order_create)
order.add_command(order_show)
order.add_command(order_status)
product.add_command(product_list)
webhook.add_command(webhook_receive)
