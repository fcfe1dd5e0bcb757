"""Application service: Cancel Shipment use case."""

from __future__ import annotations

from stockledger.application.shipment_lines import batch_reference
from stockledger.domain.service.reservation_manager import ReservationManager


class CancelShipmentHandler:

    def __init__(self, reservations: ReservationManager) -> None:
        self._reservations = reservations

    def handle(self, shipment_id: int) -> int:
        """Release what is still reserved for the batch; returns units released."""
        return self._reservations.release_all(batch_reference(shipment_id))
