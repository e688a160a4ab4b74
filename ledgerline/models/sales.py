"""
Ledgerline - Sales Models

Quotations, sales orders, delivery challans and sales invoices.
"""

import uuid
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import JSON, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ledgerline.models.base import BaseModel
from ledgerline.models.procurement import DocumentTotalsMixin


class _SalesLineMixin:
    """Quantity, price and GST of a sales document line."""
    
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2),
        nullable=False,
        default=Decimal("0.00"),
    )
    gst_rate: Mapped[Decimal] = mapped_column(
        Numeric(precision=5, scale=2),
        nullable=False,
        default=Decimal("0.00"),
    )


class SalesQuotation(BaseModel, DocumentTotalsMixin):
    """Price quotation sent to a customer."""
    
    __tablename__ = "sales_quotations"
    
    quote_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("customers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="draft")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class SalesQuotationItem(BaseModel, _SalesLineMixin):
    __tablename__ = "sales_quotation_items"
    
    quotation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("sales_quotations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


class SalesOrder(BaseModel, DocumentTotalsMixin):
    """Confirmed customer order."""
    
    __tablename__ = "sales_orders"
    
    so_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("customers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    quotation_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("sales_quotations.id", ondelete="SET NULL"),
        nullable=True,
    )
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="draft")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class SalesOrderItem(BaseModel, _SalesLineMixin):
    __tablename__ = "sales_order_items"
    
    sales_order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("sales_orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


class DeliveryChallan(BaseModel):
    """
    Delivery challan (dispatch note).
    
    Posting a delivery moves stock out; it carries no ledger postings.
    """
    
    __tablename__ = "delivery_challans"
    
    dc_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    sales_order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("sales_orders.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    warehouse_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("warehouses.id", ondelete="SET NULL"),
        nullable=True,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class DeliveryChallanItem(BaseModel):
    __tablename__ = "delivery_challan_items"
    
    delivery_challan_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("delivery_challans.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sales_order_item_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("sales_order_items.id", ondelete="SET NULL"),
        nullable=True,
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
    )
    warehouse_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("warehouses.id", ondelete="SET NULL"),
        nullable=True,
    )
    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    serials: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)


class SalesInvoice(BaseModel, DocumentTotalsMixin):
    """
    Customer invoice.
    
    Posting books AR_Customer DR / Revenue CR / GST_Payable CR.
    """
    
    __tablename__ = "sales_invoices"
    
    invoice_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("customers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    delivery_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("delivery_challans.id", ondelete="SET NULL"),
        nullable=True,
    )
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="issued")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class SalesInvoiceItem(BaseModel, _SalesLineMixin):
    __tablename__ = "sales_invoice_items"
    
    sales_invoice_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("sales_invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
