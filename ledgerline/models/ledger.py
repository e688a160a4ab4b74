"""
Ledgerline - General Ledger Models

Journal headers and their debit/credit lines.

Each posted business document owns exactly one journal; the unique
(ref_type, ref_id) constraint makes a second posting fail at the
storage boundary.
"""

import uuid
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ledgerline.models.base import BaseModel


class LedgerAccount(str, Enum):
    """Ledgers the sales & accounts cycle posts to."""
    INVENTORY = "Inventory"
    AP_VENDOR = "AP_Vendor"
    AR_CUSTOMER = "AR_Customer"
    REVENUE = "Revenue"
    GST_PAYABLE = "GST_Payable"
    CASH_BANK = "Cash_Bank"


class LedgerRefType(str, Enum):
    """Source document of a posting."""
    GRN = "GRN"
    INVOICE = "INVOICE"
    PAYMENT_IN = "PAYMENT_IN"
    PAYMENT_OUT = "PAYMENT_OUT"


class JournalEntry(BaseModel):
    """Balanced journal for a single source document."""
    
    __tablename__ = "journal_entries"
    __table_args__ = (
        UniqueConstraint("ref_type", "ref_id", name="uq_journal_entries_ref"),
    )
    
    entry_number: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)
    ref_type: Mapped[str] = mapped_column(String(30), nullable=False)
    ref_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    total_debit: Mapped[Decimal] = mapped_column(Numeric(precision=15, scale=2), nullable=False)
    total_credit: Mapped[Decimal] = mapped_column(Numeric(precision=15, scale=2), nullable=False)
    
    def __repr__(self) -> str:
        return f"<JournalEntry(number={self.entry_number}, ref={self.ref_type}:{self.ref_id})>"


class LedgerEntry(BaseModel):
    """One debit or credit line of a journal."""
    
    __tablename__ = "ledger_entries"
    __table_args__ = (
        CheckConstraint("debit >= 0 AND credit >= 0", name="non_negative"),
    )
    
    journal_entry_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("journal_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    ledger: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    debit: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2),
        nullable=False,
        default=Decimal("0.00"),
    )
    credit: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2),
        nullable=False,
        default=Decimal("0.00"),
    )
    ref_type: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    ref_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    
    def __repr__(self) -> str:
        return f"<LedgerEntry(ledger={self.ledger}, dr={self.debit}, cr={self.credit})>"
