"""Unit tests for package expansion."""

import pytest

from stockledger.domain.exceptions import UnresolvedReferenceError, ValidationError
from stockledger.domain.model.deduction import ExpandedComponent
from stockledger.domain.model.product import Package, PackageComponent
from stockledger.domain.service.package_expander import PackageExpander, expand
from tests.fakes import FakePackageRepository, FakeStore


class TestExpand:

    def test_multiplies_per_package_quantity(self):
        package = Package(1, "Kit", [PackageComponent(1, 1), PackageComponent(2, 2)])

        assert expand(package, 3) == [
            ExpandedComponent(product_id=1, deduction_quantity=3),
            ExpandedComponent(product_id=2, deduction_quantity=6),
        ]

    def test_duplicate_components_are_merged(self):
        package = Package(
            1, "Kit",
            [PackageComponent(2, 1), PackageComponent(1, 1), PackageComponent(2, 3)],
        )

        assert expand(package, 2) == [
            ExpandedComponent(product_id=2, deduction_quantity=8),
            ExpandedComponent(product_id=1, deduction_quantity=2),
        ]

    def test_empty_package(self):
        assert expand(Package(1, "Empty"), 5) == []

    def test_non_positive_quantity_rejected(self):
        with pytest.raises(ValidationError):
            expand(Package(1, "Kit", [PackageComponent(1, 1)]), 0)

    def test_component_quantity_must_be_positive(self):
        with pytest.raises(ValidationError, match="must be positive"):
            PackageComponent(1, 0)


class TestPackageExpander:

    def test_expand_by_id(self):
        store = FakeStore()
        store.add_package(7, [(1, 1), (2, 2)])
        expander = PackageExpander(FakePackageRepository(store))

        result = expander.expand(7, 3)

        assert [(c.product_id, c.deduction_quantity) for c in result] == [(1, 3), (2, 6)]

    def test_unknown_package(self):
        expander = PackageExpander(FakePackageRepository(FakeStore()))
        with pytest.raises(UnresolvedReferenceError, match="Package 99 not found"):
            expander.expand(99, 1)
