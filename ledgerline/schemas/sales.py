"""
Ledgerline - Sales Schemas

Pydantic schemas for quotations, sales orders, deliveries and invoices.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ledgerline.schemas.common import DeliveryLineItemCreate, LineItemCreate, LineItemResponse


# ===========================================
# QUOTATION & SALES ORDER SCHEMAS
# ===========================================

class QuotationCreate(BaseModel):
    customer_id: UUID
    items: List[LineItemCreate] = Field(..., min_length=1)
    status: str = Field("draft", max_length=30)
    notes: Optional[str] = None


class QuotationResponse(BaseModel):
    id: UUID
    quote_number: str
    customer_id: UUID
    status: str
    notes: Optional[str]
    subtotal: float
    gst_total: float
    total: float
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SalesOrderCreate(BaseModel):
    customer_id: UUID
    quotation_id: Optional[UUID] = None
    items: List[LineItemCreate] = Field(..., min_length=1)
    status: str = Field("draft", max_length=30)
    notes: Optional[str] = None


class SalesOrderResponse(BaseModel):
    id: UUID
    so_number: str
    customer_id: UUID
    quotation_id: Optional[UUID]
    status: str
    notes: Optional[str]
    subtotal: float
    gst_total: float
    total: float
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ===========================================
# DELIVERY SCHEMAS
# ===========================================

class DeliveryCreate(BaseModel):
    """
    Schema for dispatching goods against a sales order.

    sales_order_id may be the order's UUID or its SO number.
    """
    sales_order_id: str = Field(..., min_length=1)
    warehouse_id: Optional[UUID] = None
    items: List[DeliveryLineItemCreate] = Field(..., min_length=1)
    notes: Optional[str] = None


# ===========================================
# INVOICE SCHEMAS
# ===========================================

class InvoiceCreate(BaseModel):
    customer_id: UUID
    delivery_id: Optional[UUID] = None
    items: List[LineItemCreate] = Field(..., min_length=1)
    notes: Optional[str] = None


class InvoiceResponse(BaseModel):
    id: UUID
    invoice_number: str
    customer_id: UUID
    delivery_id: Optional[UUID]
    status: str
    notes: Optional[str]
    subtotal: float
    gst_total: float
    total: float
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class InvoiceDetailResponse(InvoiceResponse):
    """Invoice with its lines and settlement position."""
    items: List[LineItemResponse] = []
    amount_paid: float
    outstanding: float
