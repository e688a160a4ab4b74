"""
Ledgerline - Master Data Models

Products, vendors, customers, tax slabs and warehouses.
"""

import uuid
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ledgerline.models.base import BaseModel


class Warehouse(BaseModel):
    """Physical stock location."""
    
    __tablename__ = "warehouses"
    
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, unique=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Product(BaseModel):
    """
    Product master.
    
    Serialized products (has_serial) carry one serial number per unit
    through every stock movement.
    """
    
    __tablename__ = "products"
    
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sku: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        unique=True,
        comment="Stock Keeping Unit",
    )
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    unit: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        comment="e.g., pcs, kg, box",
    )
    gst_percent: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=5, scale=2),
        nullable=True,
    )
    unit_price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=15, scale=2),
        nullable=True,
    )
    has_serial: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    default_warehouse_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("warehouses.id", ondelete="SET NULL"),
        nullable=True,
    )
    
    def __repr__(self) -> str:
        return f"<Product(id={self.id}, sku={self.sku}, serialized={self.has_serial})>"


class _PartyMixin:
    """Contact fields shared by vendors and customers."""
    
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    gstin: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    contact_number: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    contact_person_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)


class Vendor(BaseModel, _PartyMixin):
    """Supplier we purchase from."""
    
    __tablename__ = "vendors"


class Customer(BaseModel, _PartyMixin):
    """Customer we sell to."""
    
    __tablename__ = "customers"


class TaxSlab(BaseModel):
    """GST slab, e.g. 'GST 18%'."""
    
    __tablename__ = "tax_slabs"
    
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    rate: Mapped[Decimal] = mapped_column(Numeric(precision=5, scale=2), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
