"""StockMovement: one immutable entry in the movement ledger.

Movements are written once and never edited.  A mistake is corrected by
appending a compensating ``ADJUSTMENT`` movement.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.stock_level import StockLevel
from stockledger.domain.model.value_objects import Reference


class MovementType(Enum):
    IN = "in"
    OUT = "out"
    ADJUSTMENT = "adjustment"


@dataclass(frozen=True)
class StockMovement:
    """A signed quantity change with before/after snapshots of the stock level.

    New movements come from ``StockMovement.record()``, which validates.
    The plain constructor does not, so repositories can reconstitute rows
    as stored and the auditor can see a damaged row instead of crashing
    on it.
    """

    product_id: int
    warehouse_id: int
    type: MovementType
    quantity: int
    quantity_before: int
    quantity_after: int
    reference: Reference | None = None
    notes: str = ""
    id: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def validate(self) -> None:
        if self.quantity_after != self.quantity_before + self.quantity:
            raise ValidationError(
                f"Movement snapshot mismatch: {self.quantity_before} "
                f"{self.quantity:+d} != {self.quantity_after}"
            )
        if self.type == MovementType.OUT and self.quantity >= 0:
            raise ValidationError("Outbound movements must have a negative quantity")
        if self.type == MovementType.IN and self.quantity <= 0:
            raise ValidationError("Inbound movements must have a positive quantity")
        if self.type == MovementType.ADJUSTMENT and self.quantity == 0:
            raise ValidationError("Adjustments must change the quantity")

    # --- Factories (the level has already been mutated) ----------------------

    @staticmethod
    def record(
        level: StockLevel,
        movement_type: MovementType,
        before: int,
        after: int,
        reference: Reference | None,
        notes: str = "",
    ) -> StockMovement:
        movement = StockMovement(
            product_id=level.product_id,
            warehouse_id=level.warehouse_id,
            type=movement_type,
            quantity=after - before,
            quantity_before=before,
            quantity_after=after,
            reference=reference,
            notes=notes,
        )
        movement.validate()
        return movement

    @property
    def is_consistent(self) -> bool:
        return self.quantity_after == self.quantity_before + self.quantity
