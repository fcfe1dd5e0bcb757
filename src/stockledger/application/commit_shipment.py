"""Application service: Commit Shipment use case.

The whole batch is advanced to shipped.  Recipients already shipped on
their own are covered; only the remainder is deducted.
"""

from __future__ import annotations

from stockledger.application.dto import DeductionResultDTO, ShipmentItemSpec
from stockledger.application.shipment_lines import batch_reference, to_lines
from stockledger.domain.service.reservation_manager import ReservationManager


class CommitShipmentHandler:

    def __init__(self, reservations: ReservationManager) -> None:
        self._reservations = reservations

    def handle(self, shipment_id: int, items: list[ShipmentItemSpec]) -> DeductionResultDTO:
        result = self._reservations.commit(batch_reference(shipment_id), to_lines(items))
        return DeductionResultDTO.from_result(result)
