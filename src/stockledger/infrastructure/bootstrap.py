"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from functools import lru_cache, partial

from sqlalchemy.orm import Session, sessionmaker

from stockledger.domain.repository.unit_of_work import UnitOfWorkFactory
from stockledger.domain.service.deduction_engine import DeductionEngine
from stockledger.domain.service.ledger_auditor import LedgerAuditor
from stockledger.domain.service.reservation_manager import ReservationManager
from stockledger.domain.service.stock_adjustment_service import StockAdjustmentService
from stockledger.domain.service.warehouse_resolver import WarehouseResolver
from stockledger.infrastructure.config import get_settings
from stockledger.infrastructure.persistence.database import (
    create_tables,
    make_engine,
    make_session_factory,
)
from stockledger.infrastructure.persistence.sqlalchemy_unit_of_work import (
    SqlAlchemyUnitOfWork,
)


@lru_cache
def session_factory() -> sessionmaker[Session]:
    settings = get_settings()
    engine = make_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
    create_tables(engine)
    return make_session_factory(engine)


def unit_of_work_factory() -> UnitOfWorkFactory:
    return partial(SqlAlchemyUnitOfWork, session_factory())


def warehouse_resolver() -> WarehouseResolver:
    settings = get_settings()
    return WarehouseResolver(
        default_warehouse_id=settings.DEFAULT_WAREHOUSE_ID,
        channel_warehouses=dict(settings.CHANNEL_WAREHOUSES),
    )


def deduction_engine() -> DeductionEngine:
    return DeductionEngine(
        unit_of_work_factory(),
        warehouse_resolver(),
        deduction_statuses=get_settings().DEDUCTION_STATUSES,
    )


def reservation_manager() -> ReservationManager:
    return ReservationManager(unit_of_work_factory(), deduction_engine())


def adjustment_service() -> StockAdjustmentService:
    return StockAdjustmentService(unit_of_work_factory())


def ledger_auditor() -> LedgerAuditor:
    return LedgerAuditor(unit_of_work_factory())
