"""Application service: Adjust Stock use case."""

from __future__ import annotations

from stockledger.application.dto import MovementDTO
from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.value_objects import Reference, ReferenceType
from stockledger.domain.service.stock_adjustment_service import StockAdjustmentService


class AdjustStockHandler:

    def __init__(self, adjustments: StockAdjustmentService) -> None:
        self._adjustments = adjustments

    def handle(
        self,
        product_id: int,
        warehouse_id: int,
        delta: int,
        notes: str,
        adjustment_id: int | None = None,
    ) -> MovementDTO:
        """Record a correction. A reason is required for the audit trail."""
        if not notes or not notes.strip():
            raise ValidationError("An adjustment needs a reason")
        reference = None
        if adjustment_id is not None:
            reference = Reference(ReferenceType.MANUAL_ADJUSTMENT, adjustment_id)
        movement = self._adjustments.adjust(
            product_id, warehouse_id, delta, reference=reference, notes=notes.strip()
        )
        return MovementDTO.from_movement(movement)
