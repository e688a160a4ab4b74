"""
Ledgerline - Accounting & Inventory Schemas

Read models for ledger lines, journals, the trial balance, the stock
ledger and on-hand balances.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


# ===========================================
# LEDGER SCHEMAS
# ===========================================

class LedgerEntryResponse(BaseModel):
    id: UUID
    journal_entry_id: UUID
    line_number: int
    ledger: str
    debit: float
    credit: float
    ref_type: str
    ref_id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class JournalResponse(BaseModel):
    """A posted journal with its lines."""
    id: UUID
    entry_number: str
    ref_type: str
    ref_id: UUID
    description: Optional[str]
    total_debit: float
    total_credit: float
    created_at: datetime
    lines: List[LedgerEntryResponse] = []

    model_config = ConfigDict(from_attributes=True)


class TrialBalanceRowResponse(BaseModel):
    ledger: str
    total_debit: float
    total_credit: float
    balance: float


class TrialBalanceResponse(BaseModel):
    rows: List[TrialBalanceRowResponse]
    total_debit: float
    total_credit: float
    is_balanced: bool


# ===========================================
# STOCK SCHEMAS
# ===========================================

class StockLedgerEntryResponse(BaseModel):
    id: UUID
    ref_type: str
    ref_id: UUID
    product_id: UUID
    product_name: str
    warehouse_id: Optional[UUID]
    quantity: int
    qty_delta: int
    serials: List[str]
    created_at: datetime


class StockBalanceResponse(BaseModel):
    product_id: UUID
    product_name: str
    warehouse_id: Optional[UUID]
    quantity: int
    version: int
