"""Catalog aggregates: Product and Package.

The ledger only needs to know whether an item tracks stock and, for
packages, what it is made of.  Everything else about the catalog
(prices, images, descriptions) belongs to other subsystems.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from stockledger.domain.exceptions import ValidationError


@dataclass
class Product:
    """A stocked item in the catalog."""

    id: int
    name: str
    track_quantity: bool = True

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("Product name is required")


@dataclass(frozen=True)
class PackageComponent:
    """How many units of one product a single package contains."""

    product_id: int
    quantity: int = 1

    def __post_init__(self) -> None:
        if self.quantity <= 0:
            raise ValidationError(
                f"Package component quantity must be positive, got {self.quantity}"
            )


@dataclass
class Package:
    """A named bundle of products sold as one unit.

    The composition is read at deduction time; editing it later does not
    touch movements that were already recorded.
    """

    id: int
    name: str
    components: list[PackageComponent] = field(default_factory=list)
    track_stock: bool = True
    default_warehouse_id: int | None = None

    @property
    def is_empty(self) -> bool:
        return not self.components
