"""
Ledgerline - Payment Models

Inward (customer) and outward (vendor) payments.
"""

import uuid
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import Date, ForeignKey, Numeric, String, Text, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from ledgerline.models.base import BaseModel


class PaymentType(str, Enum):
    """Direction of a payment."""
    IN = "in"     # Received from a customer against an invoice
    OUT = "out"   # Paid to a vendor against a purchase


class Payment(BaseModel):
    """Cash or bank movement settling an invoice or a purchase."""
    
    __tablename__ = "payments"
    
    type: Mapped[PaymentType] = mapped_column(
        SQLEnum(PaymentType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    payment_direction: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="inward or outward",
    )
    reference_type: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        comment="invoice or purchase",
    )
    reference_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    customer_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("customers.id", ondelete="RESTRICT"),
        nullable=True,
    )
    vendor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("vendors.id", ondelete="RESTRICT"),
        nullable=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(precision=15, scale=2), nullable=False)
    method: Mapped[str] = mapped_column(String(50), nullable=False, default="cash")
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="INR")
    payment_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
