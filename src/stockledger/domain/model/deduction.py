"""Small value types passed between the expander, the engine and callers."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ExpandedComponent:
    """One product a package line fans out into."""

    product_id: int
    deduction_quantity: int


@dataclass(frozen=True)
class StockTarget:
    """A fully resolved (product, warehouse, quantity) the ledger can act on."""

    product_id: int
    warehouse_id: int
    quantity: int

    @property
    def key(self) -> tuple[int, int]:
        return self.product_id, self.warehouse_id


@dataclass(frozen=True)
class LineError:
    reference_id: int
    message: str


@dataclass
class DeductionResult:
    """Outcome counts for one line or an aggregated batch.

    ``skipped`` counts targets that were already applied earlier; those
    are normal outcomes, not errors.
    """

    deducted: int = 0
    skipped: int = 0
    errors: list[LineError] = field(default_factory=list)

    def add_error(self, reference_id: int, message: str) -> None:
        self.errors.append(LineError(reference_id, message))

    def merge(self, other: DeductionResult) -> None:
        self.deducted += other.deducted
        self.skipped += other.skipped
        self.errors.extend(other.errors)
