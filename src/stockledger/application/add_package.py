"""Application service: Add Package use case."""

from __future__ import annotations

from stockledger.domain.exceptions import EntityNotFoundError, ValidationError
from stockledger.domain.model.product import Package, PackageComponent
from stockledger.domain.repository.unit_of_work import UnitOfWorkFactory


class AddPackageHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(
        self,
        name: str,
        components: list[tuple[int, int]],
        track_stock: bool = True,
        default_warehouse_id: int | None = None,
        package_id: int | None = None,
    ) -> Package:
        """Create a bundle from (product_id, quantity_per_package) pairs."""
        if not name or not name.strip():
            raise ValidationError("Package name is required")

        with self._uow_factory() as uow:
            for product_id, _ in components:
                if uow.products.get_by_id(product_id) is None:
                    raise EntityNotFoundError(f"Product #{product_id} not found")

            if package_id is None:
                package_id = uow.packages.next_id()
            elif uow.packages.get_by_id(package_id) is not None:
                raise ValidationError(f"Package #{package_id} already exists")

            package = Package(
                id=package_id,
                name=name.strip(),
                components=[PackageComponent(pid, qty) for pid, qty in components],
                track_stock=track_stock,
                default_warehouse_id=default_warehouse_id,
            )
            uow.packages.save(package)
            uow.commit()
        return package
