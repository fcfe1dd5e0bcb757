"""Abstract unit of work: one database transaction and its repositories.

Usage::

    with uow_factory() as uow:
        level = uow.stock_levels.get_for_update(product_id, warehouse_id)
        ...
        uow.commit()

Leaving the block without ``commit()`` rolls everything back.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from stockledger.domain.repository.movement_repository import MovementRepository
from stockledger.domain.repository.product_repository import (
    PackageRepository,
    ProductRepository,
)
from stockledger.domain.repository.reservation_repository import ReservationRepository
from stockledger.domain.repository.stock_level_repository import StockLevelRepository


class UnitOfWork(ABC):

    stock_levels: StockLevelRepository
    movements: MovementRepository
    products: ProductRepository
    packages: PackageRepository
    reservations: ReservationRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, *exc_info) -> None:
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Make every change in this unit durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard uncommitted changes. A no-op after ``commit()``."""


UnitOfWorkFactory = Callable[[], UnitOfWork]
