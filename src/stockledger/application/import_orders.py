"""Application service: Import Orders use case.

Marketplace imports are re-run over the same rows whenever a sync
retries.  Every row is keyed to its order item, so a second pass only
reports skips.
"""

from __future__ import annotations

import logging

from stockledger.application.dto import DeductionResultDTO, ImportRow
from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.deduction import DeductionResult
from stockledger.domain.model.fulfillable_line import FulfillableLine
from stockledger.domain.model.value_objects import ReferenceType
from stockledger.domain.service.deduction_engine import DeductionEngine

logger = logging.getLogger(__name__)


class ImportOrdersHandler:

    def __init__(self, engine: DeductionEngine) -> None:
        self._engine = engine

    def handle(self, rows: list[ImportRow]) -> DeductionResultDTO:
        result = DeductionResult()
        lines = []
        for row in rows:
            try:
                lines.append(
                    FulfillableLine.create(
                        ReferenceType.ORDER_ITEM,
                        row.order_item_id,
                        quantity=row.quantity,
                        fulfillment_status=row.fulfillment_status,
                        product_id=row.product_id,
                        package_id=row.package_id,
                        warehouse_id=row.warehouse_id,
                        channel=row.channel,
                    )
                )
            except ValidationError as exc:
                logger.warning("Rejected import row %s: %s", row.order_item_id, exc)
                result.add_error(row.order_item_id, str(exc))

        result.merge(self._engine.deduct_all(lines))
        logger.info(
            "Import finished: %d deducted, %d skipped, %d error(s)",
            result.deducted,
            result.skipped,
            len(result.errors),
        )
        return DeductionResultDTO.from_result(result)
