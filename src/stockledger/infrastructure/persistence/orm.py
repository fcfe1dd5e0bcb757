"""SQLAlchemy table mappings.

Rows are plain persistence records; the repositories translate them to
and from domain objects.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class ProductRow(Base):
    __tablename__ = "products"

    # Catalog ids are assigned by the shop, not by this database.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    track_quantity: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class PackageRow(Base):
    __tablename__ = "packages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    track_stock: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    default_warehouse_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    components: Mapped[list[PackageComponentRow]] = relationship(
        back_populates="package",
        cascade="all, delete-orphan",
        order_by="PackageComponentRow.position",
    )


class PackageComponentRow(Base):
    __tablename__ = "package_components"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    package_id: Mapped[int] = mapped_column(
        ForeignKey("packages.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id"), nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    package: Mapped[PackageRow] = relationship(back_populates="components")


class StockLevelRow(Base):
    __tablename__ = "stock_levels"
    __table_args__ = (
        UniqueConstraint("product_id", "warehouse_id", name="uq_stock_level_pair"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[int] = mapped_column(Integer, nullable=False)
    warehouse_id: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reserved_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Derived, stored for reporting queries.
    available_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )


class StockMovementRow(Base):
    __tablename__ = "stock_movements"
    __table_args__ = (
        Index("ix_stock_movements_pair", "product_id", "warehouse_id"),
        Index(
            "ix_stock_movements_reference", "reference_type", "reference_id", "product_id"
        ),
        # At most one outbound movement per (reference, product).
        Index(
            "uq_stock_movements_out_per_reference",
            "reference_type",
            "reference_id",
            "product_id",
            unique=True,
            sqlite_where=text("type = 'out'"),
            postgresql_where=text("type = 'out'"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[int] = mapped_column(Integer, nullable=False)
    warehouse_id: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity_before: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity_after: Mapped[int] = mapped_column(Integer, nullable=False)
    reference_type: Mapped[str | None] = mapped_column(String(40), nullable=True)
    reference_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )


class StockReservationRow(Base):
    __tablename__ = "stock_reservations"
    __table_args__ = (
        UniqueConstraint(
            "reference_type",
            "reference_id",
            "product_id",
            "warehouse_id",
            name="uq_stock_reservation_hold",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    reference_type: Mapped[str] = mapped_column(String(40), nullable=False)
    reference_id: Mapped[int] = mapped_column(Integer, nullable=False)
    product_id: Mapped[int] = mapped_column(Integer, nullable=False)
    warehouse_id: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )
