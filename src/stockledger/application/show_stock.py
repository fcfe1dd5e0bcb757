"""Application service: Show Stock use case (query)."""

from __future__ import annotations

from stockledger.application.dto import StockLevelDTO
from stockledger.domain.repository.unit_of_work import UnitOfWorkFactory


class ShowStockHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, product_id: int | None = None) -> list[StockLevelDTO]:
        with self._uow_factory() as uow:
            levels = uow.stock_levels.list_all()
            names = {p.id: p.name for p in uow.products.list_all()}

        return [
            StockLevelDTO(
                product_id=level.product_id,
                product_name=names.get(level.product_id, "?"),
                warehouse_id=level.warehouse_id,
                quantity=level.quantity,
                reserved=level.reserved_quantity,
                available=level.available_quantity,
            )
            for level in sorted(levels, key=lambda l: (l.product_id, l.warehouse_id))
            if product_id is None or level.product_id == product_id
        ]
