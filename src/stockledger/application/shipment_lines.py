"""Shared translation of shipment items into ledger lines."""

from __future__ import annotations

from stockledger.application.dto import ShipmentItemSpec
from stockledger.domain.model.fulfillable_line import FulfillableLine
from stockledger.domain.model.value_objects import Reference, ReferenceType


def batch_reference(shipment_id: int) -> Reference:
    return Reference(ReferenceType.SHIPMENT, shipment_id)


def to_line(item: ShipmentItemSpec, status: str | None = None) -> FulfillableLine:
    return FulfillableLine.create(
        ReferenceType.SHIPMENT_ITEM,
        item.item_id,
        quantity=item.quantity,
        fulfillment_status=status or item.status,
        product_id=item.product_id,
        package_id=item.package_id,
        warehouse_id=item.warehouse_id,
    )


def to_lines(items: list[ShipmentItemSpec]) -> list[FulfillableLine]:
    return [to_line(item) for item in items]
