"""StockLevel aggregate: on-hand and reserved stock per product per warehouse.

Each (product, warehouse) pair has one StockLevel that knows the physical
quantity on hand and how much of it has been earmarked by reservations.
Callers must hold the row lock for the pair while mutating it.
"""

from __future__ import annotations

from dataclasses import dataclass

from stockledger.domain.exceptions import ValidationError


@dataclass
class StockLevel:
    """Aggregate root for stock tracking.

    Invariants:
    - ``available_quantity == quantity - reserved_quantity``
    - ``reserved_quantity`` is never negative

    ``available_quantity`` may still drop below zero when a deduction
    runs ahead of stock; that state is an anomaly for the auditor to
    report, not something this class hides.
    """

    product_id: int
    warehouse_id: int
    quantity: int = 0
    reserved_quantity: int = 0

    @property
    def available_quantity(self) -> int:
        return self.quantity - self.reserved_quantity

    @property
    def is_anomalous(self) -> bool:
        return self.available_quantity < 0

    def apply_delta(self, delta: int) -> tuple[int, int]:
        """Change the physical quantity and return the (before, after) snapshot."""
        if not isinstance(delta, int) or isinstance(delta, bool):
            raise ValidationError(
                f"Stock delta must be an integer, got {type(delta).__name__}"
            )
        if delta == 0:
            raise ValidationError("Stock delta must be non-zero")
        before = self.quantity
        self.quantity = before + delta
        return before, self.quantity

    def reserve(self, amount: int) -> bool:
        """Earmark *amount* units if that many are available.

        Returns False and leaves the level untouched when they are not.
        """
        if amount <= 0:
            raise ValidationError("Reservation quantity must be positive")
        if amount > self.available_quantity:
            return False
        self.reserved_quantity += amount
        return True

    def release(self, amount: int) -> None:
        """Give back previously reserved stock (rollback or commit)."""
        if amount <= 0:
            raise ValidationError("Release quantity must be positive")
        if amount > self.reserved_quantity:
            raise ValidationError(
                f"Cannot release {amount} of product {self.product_id} "
                f"in warehouse {self.warehouse_id}: only "
                f"{self.reserved_quantity} currently reserved"
            )
        self.reserved_quantity -= amount
