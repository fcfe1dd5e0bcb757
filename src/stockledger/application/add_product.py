"""Application service: Add Product use case."""

from __future__ import annotations

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.product import Product
from stockledger.domain.repository.unit_of_work import UnitOfWorkFactory


class AddProductHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(
        self,
        name: str,
        track_quantity: bool = True,
        product_id: int | None = None,
    ) -> Product:
        """Add a new product to the catalog.

        Catalog ids usually come from the shop; when none is given the
        next free one is used.
        """
        if not name or not name.strip():
            raise ValidationError("Product name is required")

        with self._uow_factory() as uow:
            if product_id is None:
                product_id = uow.products.next_id()
            elif uow.products.get_by_id(product_id) is not None:
                raise ValidationError(f"Product #{product_id} already exists")

            product = Product(id=product_id, name=name.strip(), track_quantity=track_quantity)
            uow.products.save(product)
            uow.commit()
        return product
