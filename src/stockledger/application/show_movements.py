"""Application service: Show Movements use case (query)."""

from __future__ import annotations

from stockledger.application.dto import MovementDTO
from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.value_objects import Reference
from stockledger.domain.repository.unit_of_work import UnitOfWorkFactory


class ShowMovementsHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(
        self,
        product_id: int | None = None,
        warehouse_id: int | None = None,
        reference: Reference | None = None,
    ) -> list[MovementDTO]:
        """History of one (product, warehouse) pair, or of one reference."""
        with self._uow_factory() as uow:
            if reference is not None:
                movements = uow.movements.list_by_reference(reference)
            elif product_id is not None and warehouse_id is not None:
                movements = uow.movements.list_for_stock(product_id, warehouse_id)
            else:
                raise ValidationError(
                    "Give either a reference or both product and warehouse"
                )
        return [MovementDTO.from_movement(m) for m in movements]
