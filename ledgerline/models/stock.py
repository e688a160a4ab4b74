"""
Ledgerline - Stock Models

Append-only stock ledger, versioned on-hand balances and serial numbers.
"""

import uuid
from enum import Enum
from typing import List, Optional

from sqlalchemy import JSON, ForeignKey, Integer, String, UniqueConstraint, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from ledgerline.models.base import BaseModel


class StockRefType(str, Enum):
    """Document that moved stock."""
    GRN = "GRN"             # Inbound from a vendor
    DELIVERY = "DELIVERY"   # Outbound to a customer


class SerialStatus(str, Enum):
    IN_STOCK = "in_stock"
    DELIVERED = "delivered"


class StockLedgerEntry(BaseModel):
    """
    One stock movement.
    
    Rows are never updated; on-hand stock is tracked in StockBalance.
    """
    
    __tablename__ = "stock_ledger"
    
    ref_type: Mapped[str] = mapped_column(String(30), nullable=False)
    ref_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    warehouse_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("warehouses.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Positive for inbound, negative for outbound",
    )
    qty_delta: Mapped[int] = mapped_column(Integer, nullable=False)
    serials: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)


class StockBalance(BaseModel):
    """
    On-hand quantity per product and warehouse.
    
    Updated only through compare-and-set on `version`.
    """
    
    __tablename__ = "stock_balances"
    __table_args__ = (
        UniqueConstraint("product_id", "warehouse_key", name="uq_stock_balances_product_warehouse"),
    )
    
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    warehouse_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("warehouses.id", ondelete="SET NULL"),
        nullable=True,
    )
    # NULL warehouses never collide in a unique index, so key on a string
    warehouse_key: Mapped[str] = mapped_column(String(36), nullable=False, default="")
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    
    def __repr__(self) -> str:
        return f"<StockBalance(product={self.product_id}, qty={self.quantity}, v={self.version})>"


class ProductSerial(BaseModel):
    """Serial number of one unit of a serialized product."""
    
    __tablename__ = "product_serials"
    __table_args__ = (
        UniqueConstraint("product_id", "serial", name="uq_product_serials_product_serial"),
    )
    
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    serial: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[SerialStatus] = mapped_column(
        SQLEnum(SerialStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=SerialStatus.IN_STOCK,
    )
    warehouse_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("warehouses.id", ondelete="SET NULL"),
        nullable=True,
    )
    received_ref_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    delivered_ref_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
