"""
Ledgerline - Common Schemas

Line items shared by every document and the generic create response.
"""

from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


# ===========================================
# LINE ITEMS
# ===========================================

class LineItemCreate(BaseModel):
    """
    A priced document line.

    Accepts `quantity` for `qty`, `price` for `unit_price` and
    `gst_percent` for `gst_rate`. A missing price or rate is filled in
    from the product master (or the PO line for GRNs).
    """
    product_id: UUID
    qty: int = Field(..., gt=0, validation_alias=AliasChoices("qty", "quantity"))
    unit_price: Optional[Decimal] = Field(
        None, ge=0, validation_alias=AliasChoices("unit_price", "price")
    )
    gst_rate: Optional[Decimal] = Field(
        None, ge=0, le=100, validation_alias=AliasChoices("gst_rate", "gst_percent")
    )
    serials: List[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("serials", mode="before")
    @classmethod
    def none_serials_to_empty(cls, value):
        return value or []


class DeliveryLineItemCreate(LineItemCreate):
    """Delivery line; may name its own warehouse and SO line."""
    warehouse_id: Optional[UUID] = None
    sales_order_item_id: Optional[UUID] = None


class LineItemResponse(BaseModel):
    """Stored document line with computed amounts."""
    id: UUID
    product_id: UUID
    quantity: int
    unit_price: float
    gst_rate: float
    line_subtotal: float
    line_gst: float
    line_total: float


# ===========================================
# GENERIC RESPONSES
# ===========================================

class CreatedResponse(BaseModel):
    """Response for a created document."""
    message: str
    id: UUID
    number: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
