"""CLI commands for the catalog: products and packages."""

from __future__ import annotations

import click

from stockledger.application.add_package import AddPackageHandler
from stockledger.application.add_product import AddProductHandler
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import unit_of_work_factory


def _parse_components(raw: str) -> list[tuple[int, int]]:
    """Parse '1:2,3:1' into [(product_id, quantity), ...]."""
    components: list[tuple[int, int]] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            pair = f"{pair}:1"
        product_str, qty_str = pair.split(":", 1)
        try:
            components.append((int(product_str), int(qty_str)))
        except ValueError:
            raise click.BadParameter(
                f"Invalid component '{pair}'. Expected 'ProductID:Quantity'."
            )
    return components


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--id", "product_id", type=int, default=None, help="Catalog ID (default: next free).")
@click.option(
    "--track/--no-track", "track_quantity", default=True,
    help="Whether stock is tracked for this product.",
)
def product_add(name: str, product_id: int | None, track_quantity: bool) -> None:
    """Add a new product to the catalog."""
    handler = AddProductHandler(unit_of_work_factory())

    try:
        product = handler.handle(name=name, track_quantity=track_quantity, product_id=product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    tracking = "" if product.track_quantity else " (stock not tracked)"
    click.echo(f"Product #{product.id} '{product.name}' added{tracking}")


@click.command("list")
def product_list() -> None:
    """List all products in the catalog."""
    with unit_of_work_factory()() as uow:
        products = uow.products.list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<30} {'Tracked':>8}")
    click.echo("-" * 46)
    for p in products:
        click.echo(f"{p.id:<6} {p.name:<30} {'yes' if p.track_quantity else 'no':>8}")


@click.command("add")
@click.option("--name", required=True, help="Package name.")
@click.option("--components", required=True, help="Components as 'ProductID:Qty,ProductID:Qty'.")
@click.option("--id", "package_id", type=int, default=None, help="Catalog ID (default: next free).")
@click.option("--warehouse", "default_warehouse_id", type=int, default=None,
              help="Warehouse this package ships from by default.")
@click.option("--track/--no-track", "track_stock", default=True,
              help="Whether selling the package deducts stock.")
def package_add(
    name: str,
    components: str,
    package_id: int | None,
    default_warehouse_id: int | None,
    track_stock: bool,
) -> None:
    """Add a package (bundle of products)."""
    handler = AddPackageHandler(unit_of_work_factory())

    try:
        package = handler.handle(
            name=name,
            components=_parse_components(components),
            track_stock=track_stock,
            default_warehouse_id=default_warehouse_id,
            package_id=package_id,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    parts = ", ".join(f"{c.quantity} x #{c.product_id}" for c in package.components)
    click.echo(f"Package #{package.id} '{package.name}' added: {parts}")
