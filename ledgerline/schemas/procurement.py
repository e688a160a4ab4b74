"""
Ledgerline - Procurement Schemas

Pydantic schemas for purchase orders and goods received notes.
"""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ledgerline.schemas.common import LineItemCreate


# ===========================================
# PURCHASE ORDER SCHEMAS
# ===========================================

class PurchaseOrderCreate(BaseModel):
    """Schema for raising a purchase order."""
    vendor_id: UUID
    warehouse_id: Optional[UUID] = None
    items: List[LineItemCreate] = Field(..., min_length=1)
    status: str = Field("draft", max_length=30)
    notes: Optional[str] = None


class PurchaseOrderResponse(BaseModel):
    id: UUID
    po_number: str
    vendor_id: UUID
    warehouse_id: Optional[UUID]
    status: str
    notes: Optional[str]
    subtotal: float
    gst_total: float
    total: float
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PurchaseOrderItemResponse(BaseModel):
    id: UUID
    po_id: UUID
    product_id: UUID
    quantity: int
    unit_price: float
    gst_rate: float

    model_config = ConfigDict(from_attributes=True)


# ===========================================
# GRN SCHEMAS
# ===========================================

class GoodsReceiptCreate(BaseModel):
    """
    Schema for receiving goods against a PO.

    Serialized products must list one serial per unit received.
    """
    po_id: UUID
    warehouse_id: Optional[UUID] = None
    items: List[LineItemCreate] = Field(..., min_length=1)
    received_by: Optional[str] = Field(None, max_length=255)
    remarks: Optional[str] = None


class GoodsReceiptResponse(BaseModel):
    id: UUID
    grn_number: str
    po_id: UUID
    warehouse_id: Optional[UUID]
    received_date: date
    received_by: Optional[str]
    remarks: Optional[str]
    subtotal: float
    gst_total: float
    total: float
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
