"""SQLAlchemy implementations of the domain repositories.

Every repository works inside the session owned by the unit of work and
never commits on its own.
"""

from __future__ import annotations

import logging

from sqlalchemy import exists, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stockledger.domain.model.product import Package, PackageComponent, Product
from stockledger.domain.model.stock_level import StockLevel
from stockledger.domain.model.stock_movement import MovementType, StockMovement
from stockledger.domain.model.stock_reservation import StockReservation
from stockledger.domain.model.value_objects import Reference, ReferenceType
from stockledger.domain.repository.movement_repository import MovementRepository
from stockledger.domain.repository.product_repository import (
    PackageRepository,
    ProductRepository,
)
from stockledger.domain.repository.reservation_repository import ReservationRepository
from stockledger.domain.repository.stock_level_repository import StockLevelRepository
from stockledger.infrastructure.persistence.orm import (
    PackageComponentRow,
    PackageRow,
    ProductRow,
    StockLevelRow,
    StockMovementRow,
    StockReservationRow,
)

logger = logging.getLogger(__name__)

_OUT = MovementType.OUT.value


class SqlAlchemyProductRepository(ProductRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def next_id(self) -> int:
        current = self._session.execute(
            select(func.coalesce(func.max(ProductRow.id), 0))
        ).scalar_one()
        return current + 1

    def get_by_id(self, product_id: int) -> Product | None:
        row = self._session.get(ProductRow, product_id)
        return _product(row) if row is not None else None

    def list_all(self) -> list[Product]:
        rows = self._session.execute(select(ProductRow).order_by(ProductRow.id)).scalars()
        return [_product(row) for row in rows]

    def save(self, product: Product) -> None:
        row = self._session.get(ProductRow, product.id)
        if row is None:
            row = ProductRow(id=product.id)
            self._session.add(row)
        row.name = product.name
        row.track_quantity = product.track_quantity
        self._session.flush()


class SqlAlchemyPackageRepository(PackageRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def next_id(self) -> int:
        current = self._session.execute(
            select(func.coalesce(func.max(PackageRow.id), 0))
        ).scalar_one()
        return current + 1

    def get_by_id(self, package_id: int) -> Package | None:
        row = self._session.get(PackageRow, package_id)
        if row is None:
            return None
        return Package(
            id=row.id,
            name=row.name,
            components=[
                PackageComponent(c.product_id, c.quantity) for c in row.components
            ],
            track_stock=row.track_stock,
            default_warehouse_id=row.default_warehouse_id,
        )

    def save(self, package: Package) -> None:
        row = self._session.get(PackageRow, package.id)
        if row is None:
            row = PackageRow(id=package.id)
            self._session.add(row)
        row.name = package.name
        row.track_stock = package.track_stock
        row.default_warehouse_id = package.default_warehouse_id
        row.components = [
            PackageComponentRow(product_id=c.product_id, quantity=c.quantity, position=i)
            for i, c in enumerate(package.components)
        ]
        self._session.flush()


class SqlAlchemyStockLevelRepository(StockLevelRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_for_update(self, product_id: int, warehouse_id: int) -> StockLevel:
        row = self._locked_row(product_id, warehouse_id)
        if row is None:
            # First touch of this pair.  A concurrent writer may insert the
            # same row; the savepoint keeps the rest of the transaction.
            savepoint = self._session.begin_nested()
            try:
                row = StockLevelRow(
                    product_id=product_id,
                    warehouse_id=warehouse_id,
                    quantity=0,
                    reserved_quantity=0,
                    available_quantity=0,
                )
                self._session.add(row)
                self._session.flush()
                savepoint.commit()
                logger.debug(
                    "Created stock level for product %s in warehouse %s",
                    product_id,
                    warehouse_id,
                )
            except IntegrityError:
                savepoint.rollback()
                logger.debug(
                    "Stock level for product %s in warehouse %s created concurrently",
                    product_id,
                    warehouse_id,
                )
                row = self._locked_row(product_id, warehouse_id)
                if row is None:
                    raise
        return _stock_level(row)

    def get(self, product_id: int, warehouse_id: int) -> StockLevel | None:
        row = self._session.execute(
            select(StockLevelRow).where(
                StockLevelRow.product_id == product_id,
                StockLevelRow.warehouse_id == warehouse_id,
            )
        ).scalar_one_or_none()
        return _stock_level(row) if row is not None else None

    def list_all(self) -> list[StockLevel]:
        rows = self._session.execute(
            select(StockLevelRow).order_by(
                StockLevelRow.product_id, StockLevelRow.warehouse_id
            )
        ).scalars()
        return [_stock_level(row) for row in rows]

    def save(self, level: StockLevel) -> None:
        row = self._session.execute(
            select(StockLevelRow).where(
                StockLevelRow.product_id == level.product_id,
                StockLevelRow.warehouse_id == level.warehouse_id,
            )
        ).scalar_one()
        row.quantity = level.quantity
        row.reserved_quantity = level.reserved_quantity
        row.available_quantity = level.available_quantity
        self._session.flush()

    def _locked_row(self, product_id: int, warehouse_id: int) -> StockLevelRow | None:
        return self._session.execute(
            select(StockLevelRow)
            .where(
                StockLevelRow.product_id == product_id,
                StockLevelRow.warehouse_id == warehouse_id,
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()


class SqlAlchemyMovementRepository(MovementRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def append(self, movement: StockMovement) -> int:
        row = StockMovementRow(
            product_id=movement.product_id,
            warehouse_id=movement.warehouse_id,
            type=movement.type.value,
            quantity=movement.quantity,
            quantity_before=movement.quantity_before,
            quantity_after=movement.quantity_after,
            reference_type=movement.reference.type.value if movement.reference else None,
            reference_id=movement.reference.id if movement.reference else None,
            notes=movement.notes,
            created_at=movement.created_at,
        )
        self._session.add(row)
        self._session.flush()
        return row.id

    def exists(self, reference: Reference, product_id: int) -> bool:
        return self._session.execute(
            select(exists().where(*_out_for(reference, product_id)))
        ).scalar_one()

    def deducted_quantity(self, reference: Reference, product_id: int) -> int:
        total = self._session.execute(
            select(func.coalesce(func.sum(StockMovementRow.quantity), 0)).where(
                *_out_for(reference, product_id)
            )
        ).scalar_one()
        return -total

    def sum_by_product_warehouse(self, product_id: int, warehouse_id: int) -> int:
        return self._session.execute(
            select(func.coalesce(func.sum(StockMovementRow.quantity), 0)).where(
                StockMovementRow.product_id == product_id,
                StockMovementRow.warehouse_id == warehouse_id,
            )
        ).scalar_one()

    def list_for_stock(self, product_id: int, warehouse_id: int) -> list[StockMovement]:
        rows = self._session.execute(
            select(StockMovementRow)
            .where(
                StockMovementRow.product_id == product_id,
                StockMovementRow.warehouse_id == warehouse_id,
            )
            .order_by(StockMovementRow.id)
        ).scalars()
        return [_movement(row) for row in rows]

    def list_by_reference(self, reference: Reference) -> list[StockMovement]:
        rows = self._session.execute(
            select(StockMovementRow)
            .where(
                StockMovementRow.reference_type == reference.type.value,
                StockMovementRow.reference_id == reference.id,
            )
            .order_by(StockMovementRow.id)
        ).scalars()
        return [_movement(row) for row in rows]



class SqlAlchemyReservationRepository(ReservationRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def held(self, reference: Reference, product_id: int, warehouse_id: int) -> int:
        row = self._row(reference, product_id, warehouse_id)
        return row.quantity if row is not None else 0

    def set_held(
        self, reference: Reference, product_id: int, warehouse_id: int, quantity: int
    ) -> None:
        row = self._row(reference, product_id, warehouse_id)
        if quantity <= 0:
            if row is not None:
                self._session.delete(row)
        elif row is None:
            self._session.add(
                StockReservationRow(
                    reference_type=reference.type.value,
                    reference_id=reference.id,
                    product_id=product_id,
                    warehouse_id=warehouse_id,
                    quantity=quantity,
                )
            )
        else:
            row.quantity = quantity
        self._session.flush()

    def list_for(self, reference: Reference) -> list[StockReservation]:
        rows = self._session.execute(
            select(StockReservationRow)
            .where(
                StockReservationRow.reference_type == reference.type.value,
                StockReservationRow.reference_id == reference.id,
            )
            .order_by(StockReservationRow.product_id, StockReservationRow.warehouse_id)
        ).scalars()
        return [
            StockReservation(reference, row.product_id, row.warehouse_id, row.quantity)
            for row in rows
        ]

    def _row(
        self, reference: Reference, product_id: int, warehouse_id: int
    ) -> StockReservationRow | None:
        return self._session.execute(
            select(StockReservationRow).where(
                StockReservationRow.reference_type == reference.type.value,
                StockReservationRow.reference_id == reference.id,
                StockReservationRow.product_id == product_id,
                StockReservationRow.warehouse_id == warehouse_id,
            )
        ).scalar_one_or_none()

# --- Row <-> domain mapping ---------------------------------------------------


def _out_for(reference: Reference, product_id: int) -> tuple:
    return (
        StockMovementRow.reference_type == reference.type.value,
        StockMovementRow.reference_id == reference.id,
        StockMovementRow.product_id == product_id,
        StockMovementRow.type == _OUT,
    )


def _product(row: ProductRow) -> Product:
    return Product(id=row.id, name=row.name, track_quantity=row.track_quantity)


def _stock_level(row: StockLevelRow) -> StockLevel:
    return StockLevel(
        product_id=row.product_id,
        warehouse_id=row.warehouse_id,
        quantity=row.quantity,
        reserved_quantity=row.reserved_quantity,
    )


def _movement(row: StockMovementRow) -> StockMovement:
    reference = None
    if row.reference_type is not None and row.reference_id is not None:
        reference = Reference(ReferenceType(row.reference_type), row.reference_id)
    return StockMovement(
        product_id=row.product_id,
        warehouse_id=row.warehouse_id,
        type=MovementType(row.type),
        quantity=row.quantity,
        quantity_before=row.quantity_before,
        quantity_after=row.quantity_after,
        reference=reference,
        notes=row.notes,
        id=row.id,
        created_at=row.created_at,
    )
