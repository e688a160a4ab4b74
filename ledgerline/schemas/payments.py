"""
Ledgerline - Payment Schemas
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ledgerline.models.payment import PaymentType


class PaymentInCreate(BaseModel):
    """
    Customer receipt against an invoice.

    invoice_id may be the invoice's UUID or its invoice number. The
    customer defaults to the invoice's customer.
    """
    invoice_id: str = Field(..., min_length=1)
    customer_id: Optional[UUID] = None
    amount: Decimal = Field(..., gt=0)
    mode: Optional[str] = Field(None, max_length=50)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    payment_date: Optional[date] = Field(
        None, validation_alias=AliasChoices("date", "payment_date")
    )
    notes: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class PaymentOutCreate(BaseModel):
    """
    Vendor payment.

    po_id may be the PO's UUID or its PO number.
    """
    vendor_id: UUID
    po_id: Optional[str] = None
    grn_id: Optional[UUID] = None
    amount: Decimal = Field(..., gt=0)
    mode: Optional[str] = Field(None, max_length=50)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    payment_date: Optional[date] = Field(
        None, validation_alias=AliasChoices("date", "payment_date")
    )
    notes: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class PaymentResponse(BaseModel):
    id: UUID
    type: PaymentType
    payment_direction: str
    reference_type: str
    reference_id: UUID
    customer_id: Optional[UUID]
    vendor_id: Optional[UUID]
    amount: float
    method: str
    currency: str
    payment_date: Optional[date]
    notes: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
