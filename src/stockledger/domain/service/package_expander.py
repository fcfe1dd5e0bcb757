"""Domain service: Package Expansion.

Turns one ordered package into the product quantities it actually takes
off the shelf.  The arithmetic is pure; the service only adds the
package lookup.
"""

from __future__ import annotations

from stockledger.domain.exceptions import UnresolvedReferenceError, ValidationError
from stockledger.domain.model.deduction import ExpandedComponent
from stockledger.domain.model.product import Package
from stockledger.domain.repository.product_repository import PackageRepository


def expand(package: Package, ordered_quantity: int) -> list[ExpandedComponent]:
    """Multiply every component by *ordered_quantity*.

    Components that name the same product are merged so each product is
    guarded once per line.  Order follows the first appearance of each
    product in the package.
    """
    if ordered_quantity <= 0:
        raise ValidationError("Ordered quantity must be positive")

    per_product: dict[int, int] = {}
    for component in package.components:
        per_product[component.product_id] = (
            per_product.get(component.product_id, 0) + component.quantity
        )

    return [
        ExpandedComponent(product_id, qty * ordered_quantity)
        for product_id, qty in per_product.items()
    ]


class PackageExpander:

    def __init__(self, packages: PackageRepository) -> None:
        self._packages = packages

    def load(self, package_id: int) -> Package:
        package = self._packages.get_by_id(package_id)
        if package is None:
            raise UnresolvedReferenceError(f"Package {package_id} not found")
        return package

    def expand(self, package_id: int, ordered_quantity: int) -> list[ExpandedComponent]:
        return expand(self.load(package_id), ordered_quantity)
