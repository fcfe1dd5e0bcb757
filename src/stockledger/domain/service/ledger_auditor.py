"""Domain service: Ledger Auditor.

Replays the movement ledger for each (product, warehouse) and compares
it with the stored StockLevel.  Findings are reported, never corrected:
fixing stock means writing an adjustment movement.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from stockledger.domain.exceptions import LedgerIntegrityError
from stockledger.domain.model.stock_level import StockLevel
from stockledger.domain.model.stock_movement import StockMovement
from stockledger.domain.repository.unit_of_work import UnitOfWorkFactory

logger = logging.getLogger(__name__)


class IssueKind(Enum):
    DRIFT = "drift"
    BROKEN_CHAIN = "broken_chain"
    NEGATIVE_AVAILABLE = "negative_available"


@dataclass(frozen=True)
class IntegrityIssue:
    kind: IssueKind
    product_id: int
    warehouse_id: int
    detail: str

    def __str__(self) -> str:
        return (
            f"{self.kind.value} (product {self.product_id}, "
            f"warehouse {self.warehouse_id}): {self.detail}"
        )


class LedgerAuditor:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def reconcile(self, product_id: int, warehouse_id: int) -> list[IntegrityIssue]:
        with self._uow_factory() as uow:
            level = uow.stock_levels.get(product_id, warehouse_id)
            ledger_total = uow.movements.sum_by_product_warehouse(product_id, warehouse_id)
            movements = uow.movements.list_for_stock(product_id, warehouse_id)
        return self._report(
            _check(product_id, warehouse_id, level, ledger_total, movements)
        )

    def reconcile_all(self) -> list[IntegrityIssue]:
        issues: list[IntegrityIssue] = []
        with self._uow_factory() as uow:
            for level in uow.stock_levels.list_all():
                pid, wid = level.product_id, level.warehouse_id
                issues.extend(
                    _check(
                        pid,
                        wid,
                        level,
                        uow.movements.sum_by_product_warehouse(pid, wid),
                        uow.movements.list_for_stock(pid, wid),
                    )
                )
        return self._report(issues)

    def assert_consistent(
        self, product_id: int | None = None, warehouse_id: int | None = None
    ) -> None:
        """Raise ``LedgerIntegrityError`` if any issue is found.

        Checks one pair when both ids are given, every pair otherwise.
        """
        if product_id is not None and warehouse_id is not None:
            issues = self.reconcile(product_id, warehouse_id)
        else:
            issues = self.reconcile_all()
        if issues:
            raise LedgerIntegrityError(issues)

    @staticmethod
    def _report(issues: list[IntegrityIssue]) -> list[IntegrityIssue]:
        for issue in issues:
            logger.warning("Ledger integrity issue: %s", issue)
        return issues


def _check(
    product_id: int,
    warehouse_id: int,
    level: StockLevel | None,
    ledger_total: int,
    movements: list[StockMovement],
) -> list[IntegrityIssue]:
    issues = []
    on_hand = level.quantity if level is not None else 0

    if on_hand != ledger_total:
        issues.append(
            IntegrityIssue(
                IssueKind.DRIFT,
                product_id,
                warehouse_id,
                f"stock level says {on_hand}, movements sum to {ledger_total}",
            )
        )

    previous_after = 0
    for movement in movements:
        if movement.quantity_before != previous_after:
            issues.append(
                IntegrityIssue(
                    IssueKind.BROKEN_CHAIN,
                    product_id,
                    warehouse_id,
                    f"movement {movement.id} starts at {movement.quantity_before}, "
                    f"previous movement ended at {previous_after}",
                )
            )
        if not movement.is_consistent:
            issues.append(
                IntegrityIssue(
                    IssueKind.BROKEN_CHAIN,
                    product_id,
                    warehouse_id,
                    f"movement {movement.id}: {movement.quantity_before} "
                    f"{movement.quantity:+d} != {movement.quantity_after}",
                )
            )
        previous_after = movement.quantity_after

    if level is not None and level.is_anomalous:
        issues.append(
            IntegrityIssue(
                IssueKind.NEGATIVE_AVAILABLE,
                product_id,
                warehouse_id,
                f"available quantity is {level.available_quantity}",
            )
        )
    return issues
