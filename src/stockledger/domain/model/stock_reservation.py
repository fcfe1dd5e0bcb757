"""StockReservation: units one batch holds on a (product, warehouse) pair.

``StockLevel.reserved_quantity`` is the sum of every batch's hold on the
pair.  Keeping the per-batch share lets a batch consume or release only
what it reserved itself.
"""

from __future__ import annotations

from dataclasses import dataclass

from stockledger.domain.model.value_objects import Reference


@dataclass(frozen=True)
class StockReservation:
    reference: Reference
    product_id: int
    warehouse_id: int
    quantity: int

    @property
    def key(self) -> tuple[int, int]:
        return self.product_id, self.warehouse_id
