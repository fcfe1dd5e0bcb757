"""Unit of work backed by one SQLAlchemy session.

Commit or roll back, and always close the session on the way out.
"""

from __future__ import annotations

from sqlalchemy.orm import Session, sessionmaker

from stockledger.domain.repository.unit_of_work import UnitOfWork
from stockledger.infrastructure.persistence.sqlalchemy_repositories import (
    SqlAlchemyMovementRepository,
    SqlAlchemyPackageRepository,
    SqlAlchemyProductRepository,
    SqlAlchemyReservationRepository,
    SqlAlchemyStockLevelRepository,
)


class SqlAlchemyUnitOfWork(UnitOfWork):

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self.session = self._session_factory()
        self.stock_levels = SqlAlchemyStockLevelRepository(self.session)
        self.movements = SqlAlchemyMovementRepository(self.session)
        self.products = SqlAlchemyProductRepository(self.session)
        self.packages = SqlAlchemyPackageRepository(self.session)
        self.reservations = SqlAlchemyReservationRepository(self.session)
        return self

    def __exit__(self, *exc_info) -> None:
        try:
            super().__exit__(*exc_info)
        finally:
            self.session.close()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
