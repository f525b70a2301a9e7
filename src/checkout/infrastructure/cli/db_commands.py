"""CLI commands for the order store."""

from __future__ import annotations

from pathlib import Path

import click

from checkout.domain.exceptions import DomainException
from checkout.infrastructure.bootstrap import build_services, load_catalog
from checkout.infrastructure.config import CheckoutSettings


@click.command("init")
@click.option(
    "--seed",
    "seed_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON list of products to load into the catalog.",
)
@click.pass_obj
def db_init(settings: CheckoutSettings, seed_file: Path | None) -> None:
    """Create the tables, optionally loading a product catalog."""
    try:
        services = build_services(settings)
        click.echo(f"Store ready at {settings.database_url}")
        if seed_file is not None:
            count = load_catalog(services.uow_factory, seed_file, settings.currency)
            click.echo(f"Loaded {count} products from {seed_file}")
    except DomainException as exc:
        raise click.ClickException(str(exc))
