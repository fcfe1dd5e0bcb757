"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from stockledger.domain.model.deduction import DeductionResult
from stockledger.domain.model.stock_movement import StockMovement


# --- Inputs -------------------------------------------------------------------


@dataclass(frozen=True)
class ImportRow:
    """Input: one already-parsed marketplace order item."""

    order_item_id: int
    quantity: int
    fulfillment_status: str
    product_id: int | None = None
    package_id: int | None = None
    warehouse_id: int | None = None
    channel: str | None = None


@dataclass(frozen=True)
class SaleItem:
    """Input: one item rung up at the point of sale."""

    sale_item_id: int
    quantity: int
    product_id: int | None = None
    package_id: int | None = None


@dataclass(frozen=True)
class ShipmentItemSpec:
    """Input: one recipient line of a shipment batch."""

    item_id: int
    quantity: int
    product_id: int | None = None
    package_id: int | None = None
    status: str = "pending"
    warehouse_id: int | None = None


# --- Outputs ------------------------------------------------------------------


@dataclass(frozen=True)
class DeductionResultDTO:
    deducted: int
    skipped: int
    errors: list[str] = field(default_factory=list)

    @staticmethod
    def from_result(result: DeductionResult) -> DeductionResultDTO:
        return DeductionResultDTO(
            deducted=result.deducted,
            skipped=result.skipped,
            errors=[f"line {e.reference_id}: {e.message}" for e in result.errors],
        )


@dataclass(frozen=True)
class StockLevelDTO:
    product_id: int
    product_name: str
    warehouse_id: int
    quantity: int
    reserved: int
    available: int


@dataclass(frozen=True)
class MovementDTO:
    id: int | None
    product_id: int
    warehouse_id: int
    type: str
    quantity: int
    quantity_before: int
    quantity_after: int
    reference: str  # e.g. "order_item#42", empty when there is none
    notes: str
    created_at: str

    @staticmethod
    def from_movement(movement: StockMovement) -> MovementDTO:
        return MovementDTO(
            id=movement.id,
            product_id=movement.product_id,
            warehouse_id=movement.warehouse_id,
            type=movement.type.value,
            quantity=movement.quantity,
            quantity_before=movement.quantity_before,
            quantity_after=movement.quantity_after,
            reference=str(movement.reference) if movement.reference else "",
            notes=movement.notes,
            created_at=movement.created_at.strftime("%Y-%m-%d %H:%M:%S"),
        )


@dataclass(frozen=True)
class IntegrityIssueDTO:
    kind: str
    product_id: int
    warehouse_id: int
    detail: str
