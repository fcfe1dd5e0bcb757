"""Abstract repository for per-batch reservation holds."""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.stock_reservation import StockReservation
from stockledger.domain.model.value_objects import Reference


class ReservationRepository(ABC):
    """Holds are only read or changed under the StockLevel lock of their pair."""

    @abstractmethod
    def held(self, reference: Reference, product_id: int, warehouse_id: int) -> int:
        """Units *reference* currently holds on the pair, 0 if none."""

    @abstractmethod
    def set_held(
        self, reference: Reference, product_id: int, warehouse_id: int, quantity: int
    ) -> None:
        """Replace the hold; a quantity of 0 removes it."""

    @abstractmethod
    def list_for(self, reference: Reference) -> list[StockReservation]:
        """Every non-zero hold of *reference*."""
