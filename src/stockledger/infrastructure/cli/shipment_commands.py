"""CLI commands for the shipment batch lifecycle."""

from __future__ import annotations

import click

from stockledger.application.cancel_shipment import CancelShipmentHandler
from stockledger.application.commit_shipment import CommitShipmentHandler
from stockledger.application.dto import ShipmentItemSpec
from stockledger.application.reserve_shipment import ReserveShipmentHandler
from stockledger.application.ship_shipment_item import ShipShipmentItemHandler
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import reservation_manager
from stockledger.infrastructure.cli.output import echo_result


def _parse_item(raw: str, warehouse_id: int | None) -> ShipmentItemSpec:
    """Parse 'ItemID:ProductID:Qty' or 'ItemID:ProductID:Qty:Status'."""
    parts = [p.strip() for p in raw.strip().split(":")]
    if len(parts) not in (3, 4):
        raise click.BadParameter(
            f"Invalid item format '{raw}'. Expected 'ItemID:ProductID:Qty[:Status]'."
        )
    try:
        item_id, product_id, qty = (int(p) for p in parts[:3])
    except ValueError:
        raise click.BadParameter(f"Invalid numbers in item '{raw}'.")
    return ShipmentItemSpec(
        item_id=item_id,
        quantity=qty,
        product_id=product_id,
        status=parts[3] if len(parts) == 4 else "pending",
        warehouse_id=warehouse_id,
    )


def _parse_items(raw: str, warehouse_id: int | None) -> list[ShipmentItemSpec]:
    return [_parse_item(chunk, warehouse_id) for chunk in raw.split(",") if chunk.strip()]


shipment_option = click.option("--shipment", "shipment_id", required=True, type=int, help="Shipment batch ID.")
items_option = click.option("--items", required=True, help="Items as 'ItemID:ProductID:Qty,...'.")
warehouse_option = click.option("--warehouse", "warehouse_id", type=int, default=None, help="Warehouse ID.")


@click.command("reserve")
@shipment_option
@items_option
@warehouse_option
def shipment_reserve(shipment_id: int, items: str, warehouse_id: int | None) -> None:
    """Reserve stock for every recipient of a batch (all or nothing)."""
    specs = _parse_items(items, warehouse_id)

    try:
        ok = ReserveShipmentHandler(reservation_manager()).handle(shipment_id, specs)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not ok:
        raise click.ClickException(
            f"Shipment #{shipment_id}: not enough stock, nothing reserved."
        )
    click.echo(f"Shipment #{shipment_id}: stock reserved for {len(specs)} item(s).")


@click.command("ship-item")
@shipment_option
@click.option("--item", required=True, help="Item as 'ItemID:ProductID:Qty'.")
@warehouse_option
def shipment_ship_item(shipment_id: int, item: str, warehouse_id: int | None) -> None:
    """Mark one recipient shipped and deduct its stock."""
    spec = _parse_item(item, warehouse_id)

    try:
        dto = ShipShipmentItemHandler(reservation_manager()).handle(shipment_id, spec)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    echo_result(dto)


@click.command("commit")
@shipment_option
@items_option
@warehouse_option
def shipment_commit(shipment_id: int, items: str, warehouse_id: int | None) -> None:
    """Ship the whole batch; deducts only what per-item shipments left."""
    specs = _parse_items(items, warehouse_id)

    try:
        dto = CommitShipmentHandler(reservation_manager()).handle(shipment_id, specs)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    echo_result(dto)


@click.command("cancel")
@shipment_option
def shipment_cancel(shipment_id: int) -> None:
    """Cancel a batch and release what is still reserved."""
    try:
        released = CancelShipmentHandler(reservation_manager()).handle(shipment_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Shipment #{shipment_id} cancelled, {released} unit(s) released.")
