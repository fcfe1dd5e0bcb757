"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from stockledger.domain.exceptions import ValidationError


class ReferenceType(Enum):
    """What kind of business record caused a stock movement."""

    ORDER_ITEM = "order_item"
    POS_SALE_ITEM = "pos_sale_item"
    SHIPMENT_ITEM = "shipment_item"
    SHIPMENT = "shipment"
    STOCK_RECEIPT = "stock_receipt"
    MANUAL_ADJUSTMENT = "manual_adjustment"
    INITIAL_STOCK = "initial_stock"


@dataclass(frozen=True)
class Reference:
    """Tagged pointer to the order line, shipment line or batch behind a movement."""

    type: ReferenceType
    id: int

    def __post_init__(self) -> None:
        if not isinstance(self.type, ReferenceType):
            raise ValidationError(
                f"Reference type must be a ReferenceType, got {self.type!r}"
            )
        if not isinstance(self.id, int) or isinstance(self.id, bool):
            raise ValidationError(
                f"Reference id must be an integer, got {type(self.id).__name__}"
            )

    def __str__(self) -> str:
        return f"{self.type.value}#{self.id}"


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot fulfil zero or negative units.
    """

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ProductTarget:
    product_id: int


@dataclass(frozen=True)
class PackageTarget:
    package_id: int


# A line points at exactly one of these.
Target = Union[ProductTarget, PackageTarget]
