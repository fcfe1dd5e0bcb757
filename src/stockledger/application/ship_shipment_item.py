"""Application service: Ship Shipment Item use case.

One recipient of a batch is marked shipped ahead of the rest.
"""

from __future__ import annotations

from stockledger.application.dto import DeductionResultDTO, ShipmentItemSpec
from stockledger.application.shipment_lines import batch_reference, to_line
from stockledger.domain.service.reservation_manager import ReservationManager


class ShipShipmentItemHandler:

    def __init__(self, reservations: ReservationManager) -> None:
        self._reservations = reservations

    def handle(self, shipment_id: int, item: ShipmentItemSpec) -> DeductionResultDTO:
        line = to_line(item, status=self._reservations.shipped_status)
        result = self._reservations.commit_line(line, batch_reference(shipment_id))
        return DeductionResultDTO.from_result(result)
