"""Application service: Receive Stock use case."""

from __future__ import annotations

from stockledger.application.dto import MovementDTO
from stockledger.domain.model.value_objects import Reference, ReferenceType
from stockledger.domain.service.stock_adjustment_service import StockAdjustmentService


class ReceiveStockHandler:

    def __init__(self, adjustments: StockAdjustmentService) -> None:
        self._adjustments = adjustments

    def handle(
        self,
        product_id: int,
        warehouse_id: int,
        quantity: int,
        receipt_id: int | None = None,
        initial: bool = False,
        notes: str = "",
    ) -> MovementDTO:
        """Book incoming units.

        ``initial`` tags the movement as opening stock instead of a
        purchase receipt.
        """
        reference = None
        if receipt_id is not None:
            kind = ReferenceType.INITIAL_STOCK if initial else ReferenceType.STOCK_RECEIPT
            reference = Reference(kind, receipt_id)
        movement = self._adjustments.receive(
            product_id, warehouse_id, quantity, reference=reference, notes=notes
        )
        return MovementDTO.from_movement(movement)
