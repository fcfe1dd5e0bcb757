"""FulfillableLine: the normalized unit of work the ledger accepts.

Order items, POS sale items and shipment recipients all arrive in this
shape.  The line is owned by its collaborator; the ledger only reads it.
"""

from __future__ import annotations

from dataclasses import dataclass

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.value_objects import (
    PackageTarget,
    ProductTarget,
    Quantity,
    Reference,
    ReferenceType,
    Target,
)

DEFAULT_DEDUCTION_STATUSES = frozenset({"shipped", "delivered", "completed"})
EXCLUDED_STATUSES = frozenset({"cancelled", "failed", "returned"})


@dataclass(frozen=True)
class FulfillableLine:
    """One order/shipment line pointing at exactly one product or package.

    Use ``FulfillableLine.create()`` when building from loosely typed input;
    it turns the nullable product/package ids into a ``Target``.
    """

    reference: Reference
    target: Target
    quantity: Quantity
    fulfillment_status: str
    warehouse_id: int | None = None
    channel: str | None = None

    @staticmethod
    def create(
        reference_type: ReferenceType,
        reference_id: int,
        quantity: int,
        fulfillment_status: str,
        product_id: int | None = None,
        package_id: int | None = None,
        warehouse_id: int | None = None,
        channel: str | None = None,
    ) -> FulfillableLine:
        if (product_id is None) == (package_id is None):
            raise ValidationError(
                f"Line {reference_id} must reference exactly one of product or package"
            )
        if not fulfillment_status or not fulfillment_status.strip():
            raise ValidationError(f"Line {reference_id} has no fulfillment status")

        target: Target
        if product_id is not None:
            target = ProductTarget(product_id)
        else:
            target = PackageTarget(package_id)  # type: ignore[arg-type]

        return FulfillableLine(
            reference=Reference(reference_type, reference_id),
            target=target,
            quantity=Quantity(quantity),
            fulfillment_status=fulfillment_status.strip().lower(),
            warehouse_id=warehouse_id,
            channel=channel,
        )

    @property
    def is_package(self) -> bool:
        return isinstance(self.target, PackageTarget)

    @property
    def is_cancelled(self) -> bool:
        return self.fulfillment_status in EXCLUDED_STATUSES
