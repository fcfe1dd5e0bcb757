"""Abstract repositories for the catalog aggregates.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (SQL, in-memory) live in the
infrastructure layer and in the test fakes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.product import Package, Product


class ProductRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Generate the next unique product ID."""

    @abstractmethod
    def get_by_id(self, product_id: int) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist a new or updated product."""


class PackageRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Generate the next unique package ID."""

    @abstractmethod
    def get_by_id(self, package_id: int) -> Package | None:
        """Return a package with its components, or None if not found."""

    @abstractmethod
    def save(self, package: Package) -> None:
        """Persist a new or updated package, replacing its components."""
