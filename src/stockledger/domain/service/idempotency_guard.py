"""Domain service: Idempotency Guard.

Answers "has this (reference, product) pair already been applied?"
against the movement ledger.  It must be asked while the caller holds the
StockLevel row lock for the product, otherwise two writers can both see
"not applied" and both deduct.
"""

from __future__ import annotations

from typing import Iterable

from stockledger.domain.model.value_objects import Reference
from stockledger.domain.repository.movement_repository import MovementRepository


class IdempotencyGuard:

    def __init__(self, movements: MovementRepository) -> None:
        self._movements = movements

    def already_applied(self, reference: Reference, product_id: int) -> bool:
        return self._movements.exists(reference, product_id)

    def covered_quantity(self, references: Iterable[Reference], product_id: int) -> int:
        """Units of *product_id* already deducted under any of *references*."""
        return sum(
            self._movements.deducted_quantity(reference, product_id)
            for reference in references
        )
