"""Abstract repository for the StockLevel aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.stock_level import StockLevel


class StockLevelRepository(ABC):

    @abstractmethod
    def get_for_update(self, product_id: int, warehouse_id: int) -> StockLevel:
        """Return the level for the pair under a row lock.

        Creates a zero row first if the pair has never been stocked, inside
        the same transaction, so first touch does not race with a second
        writer.
        """

    @abstractmethod
    def get(self, product_id: int, warehouse_id: int) -> StockLevel | None:
        """Return the level for the pair without locking, or None."""

    @abstractmethod
    def list_all(self) -> list[StockLevel]:
        """Return every stock level."""

    @abstractmethod
    def save(self, level: StockLevel) -> None:
        """Persist a level obtained from ``get_for_update``."""
