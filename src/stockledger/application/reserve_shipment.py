"""Application service: Reserve Shipment use case."""

from __future__ import annotations

from stockledger.application.dto import ShipmentItemSpec
from stockledger.application.shipment_lines import batch_reference, to_lines
from stockledger.domain.service.reservation_manager import ReservationManager


class ReserveShipmentHandler:

    def __init__(self, reservations: ReservationManager) -> None:
        self._reservations = reservations

    def handle(self, shipment_id: int, items: list[ShipmentItemSpec]) -> bool:
        """Earmark stock for every recipient; False leaves nothing new reserved."""
        return self._reservations.reserve_all(batch_reference(shipment_id), to_lines(items))
