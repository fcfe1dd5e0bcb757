"""CLI commands for stock levels and the movement ledger."""

from __future__ import annotations

import click

from stockledger.application.adjust_stock import AdjustStockHandler
from stockledger.application.audit_ledger import AuditLedgerHandler
from stockledger.application.receive_stock import ReceiveStockHandler
from stockledger.application.show_movements import ShowMovementsHandler
from stockledger.application.show_stock import ShowStockHandler
from stockledger.domain.exceptions import DomainException, ValidationError
from stockledger.domain.model.value_objects import Reference, ReferenceType
from stockledger.infrastructure.bootstrap import (
    adjustment_service,
    ledger_auditor,
    unit_of_work_factory,
)
from stockledger.infrastructure.cli.output import echo_movement

REFERENCE_TYPES = [t.value for t in ReferenceType]


@click.command("receive")
@click.option("--product", "product_id", required=True, type=int, help="Product ID.")
@click.option("--warehouse", "warehouse_id", required=True, type=int, help="Warehouse ID.")
@click.option("--quantity", required=True, type=int, help="Units received.")
@click.option("--receipt", "receipt_id", type=int, default=None, help="Receipt / PO number.")
@click.option("--initial", is_flag=True, default=False, help="Book as opening stock.")
@click.option("--notes", default="", help="Free-text note.")
def stock_receive(
    product_id: int,
    warehouse_id: int,
    quantity: int,
    receipt_id: int | None,
    initial: bool,
    notes: str,
) -> None:
    """Book incoming stock."""
    handler = ReceiveStockHandler(adjustment_service())

    try:
        dto = handler.handle(
            product_id, warehouse_id, quantity,
            receipt_id=receipt_id, initial=initial, notes=notes,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    echo_movement(dto)


@click.command("adjust")
@click.option("--product", "product_id", required=True, type=int, help="Product ID.")
@click.option("--warehouse", "warehouse_id", required=True, type=int, help="Warehouse ID.")
@click.option("--delta", required=True, type=int, help="Signed change, e.g. -2.")
@click.option("--reason", required=True, help="Why the stock is being corrected.")
@click.option("--adjustment", "adjustment_id", type=int, default=None, help="Adjustment document number.")
def stock_adjust(
    product_id: int, warehouse_id: int, delta: int, reason: str, adjustment_id: int | None
) -> None:
    """Correct stock with a compensating movement."""
    handler = AdjustStockHandler(adjustment_service())

    try:
        dto = handler.handle(
            product_id, warehouse_id, delta, notes=reason, adjustment_id=adjustment_id
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    echo_movement(dto)


@click.command("show")
@click.option("--product", "product_id", type=int, default=None, help="Only this product.")
def stock_show(product_id: int | None) -> None:
    """Show current stock levels."""
    lines = ShowStockHandler(unit_of_work_factory()).handle(product_id)

    if not lines:
        click.echo("No stock levels found.")
        return

    click.echo(
        f"{'ID':<6} {'Product':<20} {'WH':>4} {'On hand':>8} {'Reserved':>10} {'Available':>10}"
    )
    click.echo("-" * 63)
    for line in lines:
        flag = "  !" if line.available < 0 else ""
        click.echo(
            f"{line.product_id:<6} {line.product_name:<20} {line.warehouse_id:>4} "
            f"{line.quantity:>8} {line.reserved:>10} {line.available:>10}{flag}"
        )


@click.command("history")
@click.option("--product", "product_id", type=int, default=None, help="Product ID.")
@click.option("--warehouse", "warehouse_id", type=int, default=None, help="Warehouse ID.")
@click.option("--ref-type", type=click.Choice(REFERENCE_TYPES), default=None, help="Reference type.")
@click.option("--ref-id", type=int, default=None, help="Reference ID.")
def stock_history(
    product_id: int | None,
    warehouse_id: int | None,
    ref_type: str | None,
    ref_id: int | None,
) -> None:
    """Show movements for a product/warehouse or for one reference."""
    handler = ShowMovementsHandler(unit_of_work_factory())

    try:
        reference = None
        if ref_type is not None or ref_id is not None:
            if ref_type is None or ref_id is None:
                raise ValidationError("--ref-type and --ref-id go together")
            reference = Reference(ReferenceType(ref_type), ref_id)
        movements = handler.handle(product_id, warehouse_id, reference)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not movements:
        click.echo("No movements found.")
        return

    click.echo(
        f"{'#':<6} {'When':<20} {'Type':<11} {'Qty':>6} {'Before':>7} {'After':>7}  Reference"
    )
    click.echo("-" * 80)
    for m in movements:
        click.echo(
            f"{m.id:<6} {m.created_at:<20} {m.type:<11} {m.quantity:>+6} "
            f"{m.quantity_before:>7} {m.quantity_after:>7}  {m.reference or '-'}"
        )


@click.command("audit")
@click.option("--product", "product_id", type=int, default=None, help="Product ID.")
@click.option("--warehouse", "warehouse_id", type=int, default=None, help="Warehouse ID.")
def stock_audit(product_id: int | None, warehouse_id: int | None) -> None:
    """Check stock levels against the movement ledger."""
    issues = AuditLedgerHandler(ledger_auditor()).handle(product_id, warehouse_id)

    if not issues:
        click.echo("Ledger is consistent.")
        return

    for issue in issues:
        click.echo(
            f"{issue.kind:<20} product {issue.product_id} warehouse {issue.warehouse_id}: "
            f"{issue.detail}"
        )
    click.get_current_context().exit(1)
