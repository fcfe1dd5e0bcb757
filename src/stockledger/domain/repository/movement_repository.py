"""Abstract repository for the append-only movement ledger."""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.stock_movement import StockMovement
from stockledger.domain.model.value_objects import Reference


class MovementRepository(ABC):

    @abstractmethod
    def append(self, movement: StockMovement) -> int:
        """Write a movement and return its ID. Movements are never updated."""

    @abstractmethod
    def exists(self, reference: Reference, product_id: int) -> bool:
        """True if an outbound movement for (reference, product) is recorded.

        Must be called while holding the product/warehouse row lock.
        """

    @abstractmethod
    def deducted_quantity(self, reference: Reference, product_id: int) -> int:
        """Units already removed by outbound movements for (reference, product)."""

    @abstractmethod
    def sum_by_product_warehouse(self, product_id: int, warehouse_id: int) -> int:
        """Sum of every signed delta recorded for the pair."""

    @abstractmethod
    def list_for_stock(self, product_id: int, warehouse_id: int) -> list[StockMovement]:
        """All movements for the pair, oldest first."""

    @abstractmethod
    def list_by_reference(self, reference: Reference) -> list[StockMovement]:
        """All movements caused by one business reference, oldest first."""
