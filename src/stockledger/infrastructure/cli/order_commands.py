"""CLI commands for order deductions (marketplace imports and POS sales)."""

from __future__ import annotations

import click

from stockledger.application.dto import ImportRow, SaleItem
from stockledger.application.import_orders import ImportOrdersHandler
from stockledger.application.pos_checkout import PosCheckoutHandler
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import deduction_engine
from stockledger.infrastructure.cli.output import echo_result


@click.command("deduct")
@click.option("--item", "item_id", required=True, type=int, help="Order item / sale item ID.")
@click.option("--quantity", required=True, type=int, help="Units ordered.")
@click.option("--product", "product_id", type=int, default=None, help="Product ID.")
@click.option("--package", "package_id", type=int, default=None, help="Package ID.")
@click.option("--status", default="shipped", show_default=True, help="Fulfillment status.")
@click.option("--warehouse", "warehouse_id", type=int, default=None, help="Warehouse ID.")
@click.option("--channel", default=None, help="Sales channel (marketplace name).")
@click.option("--pos", is_flag=True, default=False, help="Treat as a completed POS sale.")
def order_deduct(
    item_id: int,
    quantity: int,
    product_id: int | None,
    package_id: int | None,
    status: str,
    warehouse_id: int | None,
    channel: str | None,
    pos: bool,
) -> None:
    """Deduct stock for one order line. Safe to re-run."""
    engine = deduction_engine()

    try:
        if pos:
            dto = PosCheckoutHandler(engine).handle(
                [SaleItem(item_id, quantity, product_id=product_id, package_id=package_id)],
                warehouse_id=warehouse_id,
            )
        else:
            dto = ImportOrdersHandler(engine).handle(
                [
                    ImportRow(
                        order_item_id=item_id,
                        quantity=quantity,
                        fulfillment_status=status,
                        product_id=product_id,
                        package_id=package_id,
                        warehouse_id=warehouse_id,
                        channel=channel,
                    )
                ]
            )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    echo_result(dto)
