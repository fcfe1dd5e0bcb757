"""Domain service: pick the warehouse a line deducts from."""

from __future__ import annotations

from dataclasses import dataclass, field

from stockledger.domain.exceptions import MissingWarehouseError
from stockledger.domain.model.fulfillable_line import FulfillableLine
from stockledger.domain.model.product import Package


@dataclass(frozen=True)
class WarehouseResolver:
    """Fallback chain: line, channel default, package default, global default."""

    default_warehouse_id: int | None = None
    channel_warehouses: dict[str, int] = field(default_factory=dict)

    def resolve(self, line: FulfillableLine, package: Package | None = None) -> int:
        if line.warehouse_id is not None:
            return line.warehouse_id
        if line.channel and line.channel in self.channel_warehouses:
            return self.channel_warehouses[line.channel]
        if package is not None and package.default_warehouse_id is not None:
            return package.default_warehouse_id
        if self.default_warehouse_id is not None:
            return self.default_warehouse_id
        raise MissingWarehouseError(
            f"No warehouse for {line.reference}: line, channel "
            f"{line.channel!r} and defaults are all unset"
        )
