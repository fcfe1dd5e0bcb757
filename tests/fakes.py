"""In-memory fakes for testing.

These implement the same abstract interfaces as the SQLAlchemy
repositories but keep everything in dicts. A FakeUnitOfWork snapshots
the store on entry and restores it on rollback, so uncommitted work
vanishes the same way it does in a database transaction.
"""

from __future__ import annotations

import copy
from dataclasses import replace

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
from stockledger.domain.repository.unit_of_work import UnitOfWork


class FakeStore:
    """The 'database' shared by every FakeUnitOfWork built from it."""

    def __init__(self) -> None:
        self.products: dict[int, Product] = {}
        self.packages: dict[int, Package] = {}
        self.levels: dict[tuple[int, int], StockLevel] = {}
        self.movements: list[StockMovement] = []
        self.reservations: dict[tuple[Reference, int, int], int] = {}
        self.next_movement_id = 1
        self.commits = 0
        # Set to an exception instance to simulate a database failure.
        self.append_error: Exception | None = None

    # --- Seeding helpers ------------------------------------------------------

    def add_product(self, product_id: int, name: str = "", track_quantity: bool = True) -> Product:
        product = Product(product_id, name or f"Product {product_id}", track_quantity)
        self.products[product_id] = product
        return product

    def add_package(
        self,
        package_id: int,
        components: list[tuple[int, int]],
        track_stock: bool = True,
        default_warehouse_id: int | None = None,
    ) -> Package:
        package = Package(
            id=package_id,
            name=f"Package {package_id}",
            components=[PackageComponent(pid, qty) for pid, qty in components],
            track_stock=track_stock,
            default_warehouse_id=default_warehouse_id,
        )
        self.packages[package_id] = package
        return package

    def stock(
        self, product_id: int, warehouse_id: int, quantity: int, reserved: int = 0
    ) -> StockLevel:
        """Seed a level together with the opening movement that explains it."""
        if product_id not in self.products:
            self.add_product(product_id)
        level = StockLevel(product_id, warehouse_id, quantity, reserved)
        self.levels[(product_id, warehouse_id)] = level
        if quantity:
            self._append(
                StockMovement(
                    product_id=product_id,
                    warehouse_id=warehouse_id,
                    type=MovementType.IN if quantity > 0 else MovementType.ADJUSTMENT,
                    quantity=quantity,
                    quantity_before=0,
                    quantity_after=quantity,
                    reference=Reference(ReferenceType.INITIAL_STOCK, product_id),
                )
            )
        return level

    # --- Queries for assertions -----------------------------------------------

    def level(self, product_id: int, warehouse_id: int) -> StockLevel:
        return self.levels[(product_id, warehouse_id)]

    def movements_for(self, reference: Reference) -> list[StockMovement]:
        return [m for m in self.movements if m.reference == reference]

    def out_movements(self) -> list[StockMovement]:
        return [m for m in self.movements if m.type == MovementType.OUT]

    def held(self, reference: Reference, product_id: int, warehouse_id: int) -> int:
        return self.reservations.get((reference, product_id, warehouse_id), 0)

    def uow_factory(self) -> FakeUnitOfWork:
        return FakeUnitOfWork(self)

    # --- Internals --------------------------------------------------------------

    def _append(self, movement: StockMovement) -> int:
        movement_id = self.next_movement_id
        self.next_movement_id += 1
        self.movements.append(replace(movement, id=movement_id))
        return movement_id

    def snapshot(self) -> tuple:
        return copy.deepcopy(
            (
                self.products,
                self.packages,
                self.levels,
                self.movements,
                self.reservations,
                self.next_movement_id,
            )
        )

    def restore(self, snapshot: tuple) -> None:
        (
            self.products,
            self.packages,
            self.levels,
            self.movements,
            self.reservations,
            self.next_movement_id,
        ) = copy.deepcopy(snapshot)


class FakeProductRepository(ProductRepository):

    def __init__(self, store: FakeStore) -> None:
        self._store = store

    def next_id(self) -> int:
        return max(self._store.products, default=0) + 1

    def get_by_id(self, product_id: int) -> Product | None:
        return copy.deepcopy(self._store.products.get(product_id))

    def list_all(self) -> list[Product]:
        return [copy.deepcopy(p) for _, p in sorted(self._store.products.items())]

    def save(self, product: Product) -> None:
        self._store.products[product.id] = copy.deepcopy(product)


class FakePackageRepository(PackageRepository):

    def __init__(self, store: FakeStore) -> None:
        self._store = store

    def next_id(self) -> int:
        return max(self._store.packages, default=0) + 1

    def get_by_id(self, package_id: int) -> Package | None:
        return copy.deepcopy(self._store.packages.get(package_id))

    def save(self, package: Package) -> None:
        self._store.packages[package.id] = copy.deepcopy(package)


class FakeStockLevelRepository(StockLevelRepository):

    def __init__(self, store: FakeStore) -> None:
        self._store = store
        self.locked: list[tuple[int, int]] = []

    def get_for_update(self, product_id: int, warehouse_id: int) -> StockLevel:
        key = (product_id, warehouse_id)
        self.locked.append(key)
        if key not in self._store.levels:
            self._store.levels[key] = StockLevel(product_id, warehouse_id)
        return copy.deepcopy(self._store.levels[key])

    def get(self, product_id: int, warehouse_id: int) -> StockLevel | None:
        return copy.deepcopy(self._store.levels.get((product_id, warehouse_id)))

    def list_all(self) -> list[StockLevel]:
        return [copy.deepcopy(level) for _, level in sorted(self._store.levels.items())]

    def save(self, level: StockLevel) -> None:
        self._store.levels[(level.product_id, level.warehouse_id)] = copy.deepcopy(level)


class FakeMovementRepository(MovementRepository):

    def __init__(self, store: FakeStore) -> None:
        self._store = store

    def append(self, movement: StockMovement) -> int:
        if self._store.append_error is not None:
            raise self._store.append_error
        return self._store._append(movement)

    def exists(self, reference: Reference, product_id: int) -> bool:
        return any(True for _ in self._outs(reference, product_id))

    def deducted_quantity(self, reference: Reference, product_id: int) -> int:
        return -sum(m.quantity for m in self._outs(reference, product_id))

    def sum_by_product_warehouse(self, product_id: int, warehouse_id: int) -> int:
        return sum(m.quantity for m in self.list_for_stock(product_id, warehouse_id))

    def list_for_stock(self, product_id: int, warehouse_id: int) -> list[StockMovement]:
        return [
            m
            for m in self._store.movements
            if m.product_id == product_id and m.warehouse_id == warehouse_id
        ]

    def list_by_reference(self, reference: Reference) -> list[StockMovement]:
        return self._store.movements_for(reference)

    def _outs(self, reference: Reference, product_id: int):
        return (
            m
            for m in self._store.movements
            if m.reference == reference
            and m.product_id == product_id
            and m.type == MovementType.OUT
        )


class FakeReservationRepository(ReservationRepository):

    def __init__(self, store: FakeStore) -> None:
        self._store = store

    def held(self, reference: Reference, product_id: int, warehouse_id: int) -> int:
        return self._store.held(reference, product_id, warehouse_id)

    def set_held(
        self, reference: Reference, product_id: int, warehouse_id: int, quantity: int
    ) -> None:
        key = (reference, product_id, warehouse_id)
        if quantity <= 0:
            self._store.reservations.pop(key, None)
        else:
            self._store.reservations[key] = quantity

    def list_for(self, reference: Reference) -> list[StockReservation]:
        return [
            StockReservation(ref, pid, wid, qty)
            for (ref, pid, wid), qty in sorted(
                self._store.reservations.items(), key=lambda item: item[0][1:]
            )
            if ref == reference
        ]


class FakeUnitOfWork(UnitOfWork):

    def __init__(self, store: FakeStore) -> None:
        self.store = store
        self.stock_levels = FakeStockLevelRepository(store)
        self.movements = FakeMovementRepository(store)
        self.products = FakeProductRepository(store)
        self.packages = FakePackageRepository(store)
        self.reservations = FakeReservationRepository(store)
        self._snapshot: tuple | None = None

    def __enter__(self) -> FakeUnitOfWork:
        self._snapshot = self.store.snapshot()
        return self

    def commit(self) -> None:
        self._snapshot = self.store.snapshot()
        self.store.commits += 1

    def rollback(self) -> None:
        if self._snapshot is not None:
            self.store.restore(self._snapshot)
