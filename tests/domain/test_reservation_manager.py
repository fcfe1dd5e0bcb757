"""Unit tests for the ReservationManager domain service."""

from stockledger.domain.model.fulfillable_line import FulfillableLine
from stockledger.domain.model.value_objects import Reference, ReferenceType
from stockledger.domain.service.deduction_engine import DeductionEngine
from stockledger.domain.service.reservation_manager import ReservationManager
from stockledger.domain.service.warehouse_resolver import WarehouseResolver
from tests.fakes import FakeStore, FakeUnitOfWork

WH = 1
A, B = 1, 2
BATCH = Reference(ReferenceType.SHIPMENT, 100)
OTHER = Reference(ReferenceType.SHIPMENT, 200)


def _manager(store: FakeStore) -> ReservationManager:
    engine = DeductionEngine(store.uow_factory, WarehouseResolver(default_warehouse_id=WH))
    return ReservationManager(store.uow_factory, engine)


def _item(item_id: int, product_id: int, quantity: int, status: str = "pending") -> FulfillableLine:
    return FulfillableLine.create(
        ReferenceType.SHIPMENT_ITEM,
        item_id,
        quantity=quantity,
        fulfillment_status=status,
        product_id=product_id,
    )


class TestReserveAll:

    def test_reserves_every_line(self):
        store = FakeStore()
        store.stock(A, WH, 10)
        store.stock(B, WH, 10)

        ok = _manager(store).reserve_all(BATCH, [_item(1, A, 3), _item(2, B, 2), _item(3, A, 1)])

        assert ok is True
        assert store.level(A, WH).reserved_quantity == 4
        assert store.level(B, WH).reserved_quantity == 2
        assert store.level(A, WH).quantity == 10
        assert store.held(BATCH, A, WH) == 4
        assert store.held(BATCH, B, WH) == 2

    def test_all_or_nothing(self):
        store = FakeStore()
        store.stock(A, WH, 5)
        store.stock(B, WH, 1)

        ok = _manager(store).reserve_all(BATCH, [_item(1, A, 3), _item(2, B, 2)])

        assert ok is False
        assert store.level(A, WH).reserved_quantity == 0
        assert store.level(B, WH).reserved_quantity == 0
        assert store.reservations == {}

    def test_existing_reservations_count_against_availability(self):
        store = FakeStore()
        store.stock(A, WH, 5, reserved=4)

        assert _manager(store).reserve_all(BATCH, [_item(1, A, 2)]) is False
        assert store.level(A, WH).reserved_quantity == 4

    def test_retry_for_the_same_batch_does_not_reserve_twice(self):
        store = FakeStore()
        store.stock(A, WH, 10)
        manager = _manager(store)
        lines = [_item(1, A, 3), _item(2, A, 2)]

        assert manager.reserve_all(BATCH, lines)
        assert manager.reserve_all(BATCH, lines)

        assert store.level(A, WH).reserved_quantity == 5
        assert store.held(BATCH, A, WH) == 5

    def test_retry_tops_up_a_grown_batch(self):
        store = FakeStore()
        store.stock(A, WH, 10)
        manager = _manager(store)
        manager.reserve_all(BATCH, [_item(1, A, 3)])

        assert manager.reserve_all(BATCH, [_item(1, A, 3), _item(2, A, 4)])

        assert store.level(A, WH).reserved_quantity == 7

    def test_retry_after_line_shipment_does_not_reserve_shipped_units(self):
        store = FakeStore()
        store.stock(A, WH, 10)
        manager = _manager(store)
        lines = [_item(1, A, 3), _item(2, A, 2)]
        manager.reserve_all(BATCH, lines)
        manager.commit_line(_item(1, A, 3, "shipped"), BATCH)

        assert manager.reserve_all(BATCH, lines)

        level = store.level(A, WH)
        assert (level.quantity, level.reserved_quantity) == (7, 2)

    def test_rows_locked_in_sorted_order(self):
        store = FakeStore()
        store.stock(A, 2, 10)
        store.stock(B, 1, 10)
        store.stock(A, 1, 10)
        seen = []
        uows = []

        def factory():
            uow = FakeUnitOfWork(store)
            uows.append(uow)
            return uow

        engine = DeductionEngine(factory, WarehouseResolver(default_warehouse_id=WH))
        manager = ReservationManager(factory, engine)
        lines = [
            FulfillableLine.create(
                ReferenceType.SHIPMENT_ITEM, i, quantity=1, fulfillment_status="pending",
                product_id=pid, warehouse_id=wid,
            )
            for i, (pid, wid) in enumerate([(B, 1), (A, 2), (A, 1)], start=1)
        ]

        assert manager.reserve_all(BATCH, lines)
        for uow in uows:
            seen.extend(uow.stock_levels.locked)
        assert seen == [(A, 1), (A, 2), (B, 1)]

    def test_unknown_product_fails_the_reservation(self):
        store = FakeStore()
        store.stock(A, WH, 10)

        assert _manager(store).reserve_all(BATCH, [_item(1, A, 1), _item(2, 404, 1)]) is False
        assert store.level(A, WH).reserved_quantity == 0

    def test_cancelled_lines_are_not_reserved(self):
        store = FakeStore()
        store.stock(A, WH, 2)

        assert _manager(store).reserve_all(BATCH, [_item(1, A, 2), _item(2, A, 5, "cancelled")])
        assert store.level(A, WH).reserved_quantity == 2

    def test_package_lines_reserve_components(self):
        store = FakeStore()
        store.stock(A, WH, 10)
        store.stock(B, WH, 10)
        store.add_package(20, [(A, 1), (B, 2)])
        line = FulfillableLine.create(
            ReferenceType.SHIPMENT_ITEM, 1, quantity=2, fulfillment_status="pending",
            package_id=20,
        )

        assert _manager(store).reserve_all(BATCH, [line])
        assert store.level(A, WH).reserved_quantity == 2
        assert store.level(B, WH).reserved_quantity == 4


class TestCommitLine:

    def test_ships_one_recipient_and_consumes_its_reservation(self):
        store = FakeStore()
        store.stock(A, WH, 10)
        manager = _manager(store)
        manager.reserve_all(BATCH, [_item(1, A, 1), _item(2, A, 1)])

        result = manager.commit_line(_item(1, A, 1, "shipped"), BATCH)

        assert result.deducted == 1
        level = store.level(A, WH)
        assert (level.quantity, level.reserved_quantity) == (9, 1)
        assert store.held(BATCH, A, WH) == 1

    def test_batch_without_reservation_leaves_other_holds_alone(self):
        store = FakeStore()
        store.stock(A, WH, 10)
        manager = _manager(store)
        assert manager.reserve_all(OTHER, [_item(10, A, 6)])

        result = manager.commit_line(_item(1, A, 4, "shipped"), BATCH)

        assert result.deducted == 1
        level = store.level(A, WH)
        assert (level.quantity, level.reserved_quantity, level.available_quantity) == (6, 6, 0)
        assert store.held(OTHER, A, WH) == 6

    def test_failed_reservation_does_not_consume_other_holds(self):
        store = FakeStore()
        store.stock(A, WH, 10)
        manager = _manager(store)
        manager.reserve_all(OTHER, [_item(10, A, 6)])
        assert manager.reserve_all(BATCH, [_item(1, A, 5)]) is False

        manager.commit_line(_item(1, A, 5, "shipped"), BATCH)

        assert store.level(A, WH).reserved_quantity == 6
        assert manager.reserve_all(Reference(ReferenceType.SHIPMENT, 300), [_item(20, A, 1)]) is False

    def test_after_batch_commit_line_is_skipped(self):
        store = FakeStore()
        store.stock(A, WH, 10)
        manager = _manager(store)
        lines = [_item(1, A, 1), _item(2, A, 1)]
        manager.reserve_all(BATCH, lines)
        manager.commit(BATCH, lines)

        result = manager.commit_line(_item(1, A, 1, "shipped"), BATCH)

        assert (result.deducted, result.skipped) == (0, 1)
        assert store.level(A, WH).quantity == 8


class TestCommitBatch:

    def test_batch_deducts_only_the_remainder(self):
        store = FakeStore()
        store.stock(A, WH, 20)
        manager = _manager(store)
        lines = [_item(i, A, 1) for i in range(1, 6)]
        assert manager.reserve_all(BATCH, lines)

        manager.commit_line(_item(1, A, 1, "shipped"), BATCH)
        manager.commit_line(_item(2, A, 1, "shipped"), BATCH)
        result = manager.commit(BATCH, lines)

        assert (result.deducted, result.skipped) == (1, 0)
        batch_movements = store.movements_for(BATCH)
        assert [m.quantity for m in batch_movements] == [-3]
        level = store.level(A, WH)
        assert (level.quantity, level.reserved_quantity) == (15, 0)
        assert store.reservations == {}

    def test_commit_rerun_is_skipped(self):
        store = FakeStore()
        store.stock(A, WH, 20)
        manager = _manager(store)
        lines = [_item(i, A, 2) for i in range(1, 4)]
        manager.reserve_all(BATCH, lines)

        manager.commit(BATCH, lines)
        result = manager.commit(BATCH, lines)

        assert (result.deducted, result.skipped) == (0, 1)
        assert store.level(A, WH).quantity == 14

    def test_commit_consumes_only_its_own_hold(self):
        store = FakeStore()
        store.stock(A, WH, 20)
        manager = _manager(store)
        manager.reserve_all(OTHER, [_item(10, A, 5)])

        manager.commit(BATCH, [_item(1, A, 3)])

        level = store.level(A, WH)
        assert (level.quantity, level.reserved_quantity) == (17, 5)

    def test_fully_covered_batch_writes_nothing(self):
        store = FakeStore()
        store.stock(A, WH, 20)
        manager = _manager(store)
        lines = [_item(1, A, 2), _item(2, A, 3)]
        manager.reserve_all(BATCH, lines)
        manager.commit_line(_item(1, A, 2, "shipped"), BATCH)
        manager.commit_line(_item(2, A, 3, "shipped"), BATCH)

        result = manager.commit(BATCH, lines)

        assert (result.deducted, result.skipped) == (0, 1)
        assert store.movements_for(BATCH) == []
        assert store.level(A, WH).quantity == 15

    def test_cancelled_recipients_are_excluded_and_their_hold_freed(self):
        store = FakeStore()
        store.stock(A, WH, 20)
        manager = _manager(store)
        manager.reserve_all(BATCH, [_item(1, A, 2), _item(2, A, 5)])

        manager.commit(BATCH, [_item(1, A, 2), _item(2, A, 5, "cancelled")])

        assert [m.quantity for m in store.movements_for(BATCH)] == [-2]
        assert store.level(A, WH).reserved_quantity == 0

    def test_one_movement_per_product(self):
        store = FakeStore()
        store.stock(A, WH, 20)
        store.stock(B, WH, 20)
        manager = _manager(store)

        result = manager.commit(BATCH, [_item(1, A, 1), _item(2, B, 2), _item(3, A, 4)])

        assert result.deducted == 2
        assert {m.product_id: m.quantity for m in store.movements_for(BATCH)} == {A: -5, B: -2}

    def test_bad_line_reported_rest_committed(self):
        store = FakeStore()
        store.stock(A, WH, 20)

        result = _manager(store).commit(BATCH, [_item(1, A, 2), _item(2, 404, 1)])

        assert result.deducted == 1
        assert [e.reference_id for e in result.errors] == [2]


class TestReleaseAll:

    def test_releases_everything_for_an_unshipped_batch(self):
        store = FakeStore()
        store.stock(A, WH, 10)
        manager = _manager(store)
        manager.reserve_all(BATCH, [_item(1, A, 2), _item(2, A, 3)])

        released = manager.release_all(BATCH)

        assert released == 5
        assert store.level(A, WH).reserved_quantity == 0
        assert store.level(A, WH).quantity == 10
        assert store.reservations == {}

    def test_only_undeducted_lines_are_released(self):
        store = FakeStore()
        store.stock(A, WH, 10)
        manager = _manager(store)
        manager.reserve_all(BATCH, [_item(1, A, 2), _item(2, A, 3)])
        manager.commit_line(_item(1, A, 2, "shipped"), BATCH)

        released = manager.release_all(BATCH)

        assert released == 3
        level = store.level(A, WH)
        assert (level.quantity, level.reserved_quantity) == (8, 0)

    def test_committed_batch_releases_nothing(self):
        store = FakeStore()
        store.stock(A, WH, 10)
        store.stock(B, WH, 10, reserved=7)  # held by another batch
        manager = _manager(store)
        lines = [_item(1, A, 2)]
        manager.reserve_all(BATCH, lines)
        manager.commit(BATCH, lines)

        assert manager.release_all(BATCH) == 0
        assert store.level(B, WH).reserved_quantity == 7

    def test_other_batches_keep_their_holds(self):
        store = FakeStore()
        store.stock(A, WH, 10)
        manager = _manager(store)
        manager.reserve_all(BATCH, [_item(1, A, 2)])
        manager.reserve_all(OTHER, [_item(10, A, 4)])

        assert manager.release_all(BATCH) == 2
        assert manager.release_all(BATCH) == 0
        assert store.level(A, WH).reserved_quantity == 4
        assert store.held(OTHER, A, WH) == 4

    def test_batch_that_never_reserved_releases_nothing(self):
        store = FakeStore()
        store.stock(A, WH, 10, reserved=3)

        assert _manager(store).release_all(BATCH) == 0
        assert store.level(A, WH).reserved_quantity == 3
