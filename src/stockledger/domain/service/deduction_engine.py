"""Domain service: Deduction Engine.

The single write path for outbound stock.  Every collaborator (order
imports, POS checkouts, shipment lines) hands over ``FulfillableLine``
objects and the engine turns them into at most one ``out`` movement per
(reference, product), no matter how many times it is called.

Per line:
  1. Skip lines whose status does not trigger deduction, and items that
     do not track stock.
  2. Resolve the warehouse and the product targets (packages expand into
     their components).
  3. Per target, in its own transaction and under the StockLevel row
     lock, ask the idempotency guard; deduct only if nothing is recorded
     yet for (reference, product).

A bad line (unknown product, no warehouse) becomes an entry in
``DeductionResult.errors`` and the rest of the batch carries on.
Database errors are not caught here.
"""

from __future__ import annotations

import logging
from typing import Iterable

from stockledger.domain.exceptions import DomainException, UnresolvedReferenceError
from stockledger.domain.model.deduction import DeductionResult, StockTarget
from stockledger.domain.model.fulfillable_line import (
    DEFAULT_DEDUCTION_STATUSES,
    FulfillableLine,
)
from stockledger.domain.model.stock_level import StockLevel
from stockledger.domain.model.stock_movement import MovementType, StockMovement
from stockledger.domain.model.value_objects import Reference
from stockledger.domain.repository.unit_of_work import UnitOfWork, UnitOfWorkFactory
from stockledger.domain.service.idempotency_guard import IdempotencyGuard
from stockledger.domain.service.package_expander import PackageExpander, expand
from stockledger.domain.service.warehouse_resolver import WarehouseResolver

logger = logging.getLogger(__name__)


class DeductionEngine:

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        warehouses: WarehouseResolver,
        deduction_statuses: Iterable[str] = DEFAULT_DEDUCTION_STATUSES,
    ) -> None:
        self._uow_factory = uow_factory
        self._warehouses = warehouses
        self._deduction_statuses = frozenset(s.lower() for s in deduction_statuses)

    @property
    def shipped_status(self) -> str:
        """A status this engine deducts on, for lines marked shipped by hand."""
        if "shipped" in self._deduction_statuses:
            return "shipped"
        return min(self._deduction_statuses)

    def triggers_deduction(self, line: FulfillableLine) -> bool:
        return (
            line.fulfillment_status in self._deduction_statuses
            and not line.is_cancelled
        )

    # --- Public API -----------------------------------------------------------

    def deduct(
        self,
        line: FulfillableLine,
        reservation: Reference | None = None,
        superseded_by: Reference | None = None,
    ) -> DeductionResult:
        """Deduct one line.

        ``reservation`` names the batch whose hold on the stock the line
        uses up; only that batch's reserved units are released.  ``superseded_by`` names a batch reference whose
        movement, if present, already covered this line.
        """
        result = DeductionResult()
        if not self.triggers_deduction(line):
            logger.debug(
                "Ignoring %s with status %r", line.reference, line.fulfillment_status
            )
            return result

        try:
            targets = self.resolve_targets(line)
        except DomainException as exc:
            logger.warning("Cannot deduct %s: %s", line.reference, exc)
            result.add_error(line.reference.id, str(exc))
            return result

        for target in targets:
            try:
                applied = self.apply(
                    line.reference, target, reservation, superseded_by
                )
            except DomainException as exc:
                logger.warning(
                    "Deduction of product %s for %s failed: %s",
                    target.product_id,
                    line.reference,
                    exc,
                )
                result.add_error(line.reference.id, str(exc))
                continue
            if applied:
                result.deducted += 1
            else:
                result.skipped += 1
        return result

    def deduct_all(self, lines: Iterable[FulfillableLine]) -> DeductionResult:
        """Deduct every line; one line failing never stops the others."""
        total = DeductionResult()
        for line in lines:
            total.merge(self.deduct(line))
        return total

    # --- Building blocks (also used by the reservation manager) ---------------

    def resolve_targets(self, line: FulfillableLine) -> list[StockTarget]:
        """Expand *line* into (product, warehouse, quantity) targets.

        Returns an empty list for items that do not track stock and for
        empty packages.  Raises ``UnresolvedReferenceError`` or
        ``MissingWarehouseError``.
        """
        with self._uow_factory() as uow:
            if line.is_package:
                return self._package_targets(uow, line)
            return self._product_targets(uow, line)

    def apply(
        self,
        reference: Reference,
        target: StockTarget,
        reservation: Reference | None = None,
        superseded_by: Reference | None = None,
    ) -> bool:
        """Deduct one target in its own transaction; False if already applied."""
        with self._uow_factory() as uow:
            level = uow.stock_levels.get_for_update(target.product_id, target.warehouse_id)
            guard = IdempotencyGuard(uow.movements)
            if guard.already_applied(reference, target.product_id):
                logger.debug(
                    "Skipping product %s for %s: already deducted",
                    target.product_id,
                    reference,
                )
                return False
            if superseded_by is not None and guard.already_applied(
                superseded_by, target.product_id
            ):
                logger.debug(
                    "Skipping product %s for %s: covered by %s",
                    target.product_id,
                    reference,
                    superseded_by,
                )
                return False

            self.record_deduction(
                uow, level, target.quantity, reference, reservation
            )
            uow.commit()
        return True

    def record_deduction(
        self,
        uow: UnitOfWork,
        level: StockLevel,
        quantity: int,
        reference: Reference,
        reservation: Reference | None = None,
        notes: str = "",
    ) -> StockMovement:
        """Write the level change and its ``out`` movement. Caller holds the lock."""
        before, after = level.apply_delta(-quantity)
        if reservation is not None:
            consume_hold(uow, level, reservation, quantity)
        uow.stock_levels.save(level)

        movement = StockMovement.record(
            level, MovementType.OUT, before, after, reference, notes
        )
        uow.movements.append(movement)

        if after < 0:
            logger.warning(
                "Stock of product %s in warehouse %s is negative (%d) after %s",
                level.product_id,
                level.warehouse_id,
                after,
                reference,
            )
        logger.info(
            "Deducted %d of product %s from warehouse %s for %s (%d -> %d)",
            quantity,
            level.product_id,
            level.warehouse_id,
            reference,
            before,
            after,
        )
        return movement

    # --- Internals ------------------------------------------------------------

    def _product_targets(self, uow: UnitOfWork, line: FulfillableLine) -> list[StockTarget]:
        product_id = line.target.product_id
        product = uow.products.get_by_id(product_id)
        if product is None:
            raise UnresolvedReferenceError(f"Product {product_id} not found")
        if not product.track_quantity:
            logger.debug("Product %s does not track quantity", product_id)
            return []
        warehouse_id = self._warehouses.resolve(line)
        return [StockTarget(product_id, warehouse_id, line.quantity.value)]

    def _package_targets(self, uow: UnitOfWork, line: FulfillableLine) -> list[StockTarget]:
        package = PackageExpander(uow.packages).load(line.target.package_id)
        if not package.track_stock:
            logger.debug("Package %s does not track stock", package.id)
            return []
        if package.is_empty:
            logger.warning(
                "Package %s (%s) has no components; nothing deducted for %s",
                package.id,
                package.name,
                line.reference,
            )
            return []

        warehouse_id = self._warehouses.resolve(line, package)
        targets = []
        for component in expand(package, line.quantity.value):
            product = uow.products.get_by_id(component.product_id)
            if product is None:
                raise UnresolvedReferenceError(
                    f"Package {package.id} contains unknown product {component.product_id}"
                )
            if not product.track_quantity:
                continue
            targets.append(
                StockTarget(component.product_id, warehouse_id, component.deduction_quantity)
            )
        return targets


def consume_hold(
    uow: UnitOfWork, level: StockLevel, reservation: Reference, quantity: int
) -> int:
    """Release up to *quantity* units of the hold *reservation* has on *level*.

    Units reserved by other batches are left alone.  Caller holds the lock.
    """
    held = uow.reservations.held(reservation, level.product_id, level.warehouse_id)
    used = min(held, quantity)
    if used > 0:
        level.release(used)
        uow.reservations.set_held(
            reservation, level.product_id, level.warehouse_id, held - used
        )
    return used
