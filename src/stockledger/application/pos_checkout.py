"""Application service: POS Checkout use case."""

from __future__ import annotations

from stockledger.application.dto import DeductionResultDTO, SaleItem
from stockledger.domain.model.fulfillable_line import FulfillableLine
from stockledger.domain.model.value_objects import ReferenceType
from stockledger.domain.service.deduction_engine import DeductionEngine

POS_CHANNEL = "pos"


class PosCheckoutHandler:

    def __init__(self, engine: DeductionEngine) -> None:
        self._engine = engine

    def handle(
        self, items: list[SaleItem], warehouse_id: int | None = None
    ) -> DeductionResultDTO:
        """Deduct a completed sale.

        The register is synchronous, so a malformed item fails the whole
        checkout with ``ValidationError`` before anything is deducted.
        """
        lines = [
            FulfillableLine.create(
                ReferenceType.POS_SALE_ITEM,
                item.sale_item_id,
                quantity=item.quantity,
                fulfillment_status="completed",
                product_id=item.product_id,
                package_id=item.package_id,
                warehouse_id=warehouse_id,
                channel=POS_CHANNEL,
            )
            for item in items
        ]
        return DeductionResultDTO.from_result(self._engine.deduct_all(lines))
