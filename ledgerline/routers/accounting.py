"""
Ledgerline - Accounting Router

Read-only views of posted journals and ledger lines.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ledgerline.database import get_async_session
from ledgerline.models.ledger import LedgerAccount, LedgerRefType
from ledgerline.services.ledger_service import LedgerService
from ledgerline.schemas.accounting import (
    JournalResponse,
    LedgerEntryResponse,
    TrialBalanceResponse,
    TrialBalanceRowResponse,
)
from ledgerline.utils.error_handling import NotFoundException


router = APIRouter()


@router.get(
    "/ledger",
    response_model=List[LedgerEntryResponse],
    summary="Ledger entries",
)
async def list_ledger_entries(
    ledger: Optional[LedgerAccount] = Query(None),
    ref_type: Optional[LedgerRefType] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    db: AsyncSession = Depends(get_async_session),
):
    """Ledger lines, newest first, optionally filtered by ledger and source document type."""
    entries = await LedgerService(db).list_entries(
        ledger=ledger.value if ledger else None,
        ref_type=ref_type.value if ref_type else None,
        limit=limit,
    )
    return [LedgerEntryResponse.model_validate(e) for e in entries]


@router.get(
    "/journal/{ref_type}/{ref_id}",
    response_model=JournalResponse,
    summary="Journal for a document",
)
async def get_journal(
    ref_type: LedgerRefType,
    ref_id: UUID,
    db: AsyncSession = Depends(get_async_session),
):
    found = await LedgerService(db).get_journal(ref_type.value, ref_id)
    if not found:
        raise NotFoundException("JournalEntry", message=f"No journal posted for {ref_type.value} {ref_id}")

    journal, lines = found
    response = JournalResponse.model_validate(journal)
    response.lines = [LedgerEntryResponse.model_validate(line) for line in lines]
    return response


@router.get(
    "/trial-balance",
    response_model=TrialBalanceResponse,
    summary="Trial balance",
)
async def get_trial_balance(
    db: AsyncSession = Depends(get_async_session),
):
    """Debit and credit totals per ledger account."""
    tb = await LedgerService(db).trial_balance()
    return TrialBalanceResponse(
        rows=[
            TrialBalanceRowResponse(
                ledger=row.ledger,
                total_debit=float(row.total_debit),
                total_credit=float(row.total_credit),
                balance=float(row.balance),
            )
            for row in tb.rows
        ],
        total_debit=float(tb.total_debit),
        total_credit=float(tb.total_credit),
        is_balanced=tb.is_balanced,
    )
