"""Domain service: Reservation Manager.

Coordinates the stock side of a shipment batch:

  reserve_all  earmark stock for every recipient line, all or nothing
  commit_line  one recipient shipped on its own
  commit       the whole batch advanced at once
  release_all  the batch cancelled before shipping

Every hold is recorded against the batch reference that made it, so a
batch only ever consumes or releases its own reserved units, and a
retried ``reserve_all`` tops up instead of reserving twice.

A batch can be shipped line by line, all at once, or a mix of both.
``commit`` deducts only the remainder that the per-line movements have
not already covered, so a unit is never deducted twice.

Multi-row operations lock StockLevel rows in sorted (product, warehouse)
order so two batches touching the same products cannot deadlock.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable

from stockledger.domain.exceptions import DomainException, InsufficientStockError
from stockledger.domain.model.deduction import DeductionResult
from stockledger.domain.model.fulfillable_line import FulfillableLine
from stockledger.domain.model.stock_level import StockLevel
from stockledger.domain.model.value_objects import Reference
from stockledger.domain.repository.unit_of_work import UnitOfWork, UnitOfWorkFactory
from stockledger.domain.service.deduction_engine import DeductionEngine, consume_hold
from stockledger.domain.service.idempotency_guard import IdempotencyGuard

logger = logging.getLogger(__name__)

StockKey = tuple[int, int]


class ReservationManager:

    def __init__(self, uow_factory: UnitOfWorkFactory, engine: DeductionEngine) -> None:
        self._uow_factory = uow_factory
        self._engine = engine

    @property
    def shipped_status(self) -> str:
        return self._engine.shipped_status

    def reserve_all(
        self, batch_reference: Reference, lines: Iterable[FulfillableLine]
    ) -> bool:
        """Reserve stock for every line of the batch or for none of them.

        Only the shortfall between what the batch needs and what it
        already holds (or has already shipped per line) is reserved, so
        calling this again for the same batch is harmless.

        Returns False when any product lacks available stock or any line
        cannot be resolved.  Nothing new is reserved in that case.
        """
        try:
            totals, covering = self._aggregate(lines)
        except DomainException as exc:
            logger.warning("Reservation for %s rejected: %s", batch_reference, exc)
            return False

        with self._uow_factory() as uow:
            guard = IdempotencyGuard(uow.movements)
            try:
                for product_id, warehouse_id in sorted(totals):
                    level = uow.stock_levels.get_for_update(product_id, warehouse_id)
                    if guard.already_applied(batch_reference, product_id):
                        continue
                    held = uow.reservations.held(batch_reference, product_id, warehouse_id)
                    shipped = guard.covered_quantity(
                        covering[(product_id, warehouse_id)], product_id
                    )
                    amount = totals[(product_id, warehouse_id)] - held - shipped
                    if amount <= 0:
                        continue
                    if not level.reserve(amount):
                        raise InsufficientStockError(
                            f"Product {product_id} in warehouse {warehouse_id}: "
                            f"need {amount}, have {level.available_quantity} available"
                        )
                    uow.stock_levels.save(level)
                    uow.reservations.set_held(
                        batch_reference, product_id, warehouse_id, held + amount
                    )
            except InsufficientStockError as exc:
                logger.warning("Reservation for %s rolled back: %s", batch_reference, exc)
                return False
            uow.commit()

        logger.info(
            "Reserved stock for %s on %d product/warehouse pair(s)",
            batch_reference,
            len(totals),
        )
        return True

    def commit_line(
        self, line: FulfillableLine, batch_reference: Reference
    ) -> DeductionResult:
        """Deduct one recipient line that was marked shipped on its own.

        Uses up the batch's hold for the line.  Skipped if the batch
        itself was already committed.
        """
        return self._engine.deduct(
            line, reservation=batch_reference, superseded_by=batch_reference
        )

    def commit(
        self, batch_reference: Reference, lines: Iterable[FulfillableLine]
    ) -> DeductionResult:
        """Deduct whatever the batch still owes after per-line shipments.

        Writes at most one ``out`` movement per product, keyed to
        *batch_reference*, for ``total - already deducted by the lines``.
        Whatever the batch still holds afterwards is released.
        """
        result = DeductionResult()
        totals: dict[StockKey, int] = defaultdict(int)
        covering: dict[StockKey, list[Reference]] = defaultdict(list)

        for line in lines:
            if line.is_cancelled:
                continue
            try:
                targets = self._engine.resolve_targets(line)
            except DomainException as exc:
                logger.warning("Leaving %s out of %s: %s", line.reference, batch_reference, exc)
                result.add_error(line.reference.id, str(exc))
                continue
            for target in targets:
                totals[target.key] += target.quantity
                covering[target.key].append(line.reference)

        for key in sorted(totals):
            try:
                deducted = self._deduct_remainder(
                    batch_reference, key, totals[key], covering[key]
                )
            except DomainException as exc:
                logger.warning(
                    "Batch deduction of product %s for %s failed: %s",
                    key[0],
                    batch_reference,
                    exc,
                )
                result.add_error(batch_reference.id, str(exc))
                continue
            if deducted:
                result.deducted += 1
            else:
                result.skipped += 1

        released = self._release_holds(batch_reference)
        if released:
            logger.info(
                "Released %d unused reserved unit(s) of %s", released, batch_reference
            )
        return result

    def release_all(self, batch_reference: Reference) -> int:
        """Give back everything the batch still holds.

        Units of lines already shipped were consumed when they were
        deducted, so only undeducted lines are released.  Returns the
        number of units released.
        """
        released = self._release_holds(batch_reference)
        logger.info("Released %d reserved unit(s) of %s", released, batch_reference)
        return released

    # --- Internals ------------------------------------------------------------

    def _aggregate(
        self, lines: Iterable[FulfillableLine]
    ) -> tuple[dict[StockKey, int], dict[StockKey, list[Reference]]]:
        totals: dict[StockKey, int] = defaultdict(int)
        covering: dict[StockKey, list[Reference]] = defaultdict(list)
        for line in lines:
            if line.is_cancelled:
                continue
            for target in self._engine.resolve_targets(line):
                totals[target.key] += target.quantity
                covering[target.key].append(line.reference)
        return totals, covering

    def _release_holds(self, batch_reference: Reference) -> int:
        released = 0
        with self._uow_factory() as uow:
            keys = sorted({hold.key for hold in uow.reservations.list_for(batch_reference)})
            for product_id, warehouse_id in keys:
                level = uow.stock_levels.get_for_update(product_id, warehouse_id)
                released += _release_hold(uow, level, batch_reference)
            uow.commit()
        return released

    def _deduct_remainder(
        self,
        batch_reference: Reference,
        key: StockKey,
        total: int,
        references: list[Reference],
    ) -> bool:
        product_id, warehouse_id = key
        with self._uow_factory() as uow:
            level = uow.stock_levels.get_for_update(product_id, warehouse_id)
            guard = IdempotencyGuard(uow.movements)
            if guard.already_applied(batch_reference, product_id):
                logger.debug("Product %s already committed for %s", product_id, batch_reference)
                return False

            covered = guard.covered_quantity(references, product_id)
            remainder = total - covered
            if remainder <= 0:
                logger.debug(
                    "Product %s fully covered by line shipments of %s",
                    product_id,
                    batch_reference,
                )
                return False

            self._engine.record_deduction(
                uow,
                level,
                remainder,
                batch_reference,
                reservation=batch_reference,
                notes=f"batch remainder: {total} ordered, {covered} shipped per line",
            )
            uow.commit()
        return True


def _release_hold(uow: UnitOfWork, level: StockLevel, batch_reference: Reference) -> int:
    held = uow.reservations.held(batch_reference, level.product_id, level.warehouse_id)
    if held <= 0:
        return 0
    released = consume_hold(uow, level, batch_reference, held)
    uow.stock_levels.save(level)
    return released
