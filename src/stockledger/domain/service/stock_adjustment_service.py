"""Domain service: inbound receipts and compensating adjustments.

The ledger is append-only, so this is the only way to put stock back or
correct a mistake: write a new ``in`` or ``adjustment`` movement.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from stockledger.domain.exceptions import EntityNotFoundError, ValidationError
from stockledger.domain.model.stock_movement import MovementType, StockMovement
from stockledger.domain.model.value_objects import Quantity, Reference
from stockledger.domain.repository.unit_of_work import UnitOfWorkFactory

logger = logging.getLogger(__name__)


class StockAdjustmentService:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def receive(
        self,
        product_id: int,
        warehouse_id: int,
        quantity: int,
        reference: Reference | None = None,
        notes: str = "",
    ) -> StockMovement:
        """Add *quantity* units on hand (purchase receipt, initial stock)."""
        amount = Quantity(quantity).value
        return self._write(product_id, warehouse_id, MovementType.IN, amount, reference, notes)

    def adjust(
        self,
        product_id: int,
        warehouse_id: int,
        delta: int,
        reference: Reference | None = None,
        notes: str = "",
    ) -> StockMovement:
        """Correct the on-hand quantity by a signed *delta*."""
        if not isinstance(delta, int) or isinstance(delta, bool) or delta == 0:
            raise ValidationError("Adjustment must be a non-zero integer")
        return self._write(
            product_id, warehouse_id, MovementType.ADJUSTMENT, delta, reference, notes
        )

    def _write(
        self,
        product_id: int,
        warehouse_id: int,
        movement_type: MovementType,
        delta: int,
        reference: Reference | None,
        notes: str,
    ) -> StockMovement:
        with self._uow_factory() as uow:
            if uow.products.get_by_id(product_id) is None:
                raise EntityNotFoundError(f"Product {product_id} not found")

            level = uow.stock_levels.get_for_update(product_id, warehouse_id)
            before, after = level.apply_delta(delta)
            uow.stock_levels.save(level)

            movement = StockMovement.record(
                level, movement_type, before, after, reference, notes
            )
            movement_id = uow.movements.append(movement)
            uow.commit()

        logger.info(
            "Recorded %s of %+d for product %s in warehouse %s (%d -> %d)",
            movement_type.value,
            delta,
            product_id,
            warehouse_id,
            before,
            after,
        )
        return replace(movement, id=movement_id)
