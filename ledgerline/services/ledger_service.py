"""
Ledgerline - Ledger Service

Double-entry posting for the sales & accounts cycle.

Every source document gets one journal whose lines must balance:
    GRN:          Dr. Inventory (total)       Cr. AP_Vendor (total)
    Invoice:      Dr. AR_Customer (total)     Cr. Revenue (subtotal)
                                              Cr. GST_Payable (gst_total)
    Payment in:   Dr. Cash_Bank (amount)      Cr. AR_Customer (amount)
    Payment out:  Dr. AP_Vendor (amount)      Cr. Cash_Bank (amount)

Postings are only flushed here. The calling service commits the journal
together with its source document, so both land or neither does.
"""

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Union

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledgerline.config import settings
from ledgerline.models.ledger import JournalEntry, LedgerAccount, LedgerEntry, LedgerRefType
from ledgerline.services.numbering import next_document_number
from ledgerline.services.totals import (
    DocumentTotals,
    ensure_balanced,
    quantize_money,
    sum_entries,
    to_decimal,
)
from ledgerline.utils.error_handling import (
    AlreadyPostedException,
    UnbalancedEntryException,
    ValidationException,
)

logger = logging.getLogger(__name__)


@dataclass
class PostingLine:
    """A debit or credit to be posted."""
    ledger: str
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")


@dataclass
class TrialBalanceRow:
    ledger: str
    total_debit: Decimal
    total_credit: Decimal

    @property
    def balance(self) -> Decimal:
        """Net debit balance (negative when the ledger is in credit)."""
        return self.total_debit - self.total_credit


@dataclass
class TrialBalance:
    rows: List[TrialBalanceRow]
    total_debit: Decimal
    total_credit: Decimal
    is_balanced: bool


def _ledger_name(ledger: Union[str, LedgerAccount]) -> str:
    return ledger.value if isinstance(ledger, LedgerAccount) else str(ledger)


def _ref_name(ref_type: Union[str, LedgerRefType]) -> str:
    return ref_type.value if isinstance(ref_type, LedgerRefType) else str(ref_type)


class LedgerService:
    """Service for journal posting and ledger queries."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ===========================================
    # POSTING
    # ===========================================

    async def is_already_posted(self, ref_type: str, ref_id: uuid.UUID) -> bool:
        """Check whether a document already has a journal."""
        result = await self.db.execute(
            select(JournalEntry.id).where(
                JournalEntry.ref_type == ref_type,
                JournalEntry.ref_id == ref_id,
            )
        )
        return result.scalar_one_or_none() is not None

    async def post_entries(
        self,
        ref_type: Union[str, LedgerRefType],
        ref_id: uuid.UUID,
        entries: Sequence[Union[PostingLine, Dict[str, Any]]],
        description: Optional[str] = None,
    ) -> Optional[JournalEntry]:
        """
        Post a balanced set of lines for a source document.

        An empty set is a no-op. Lines with zero debit and zero credit
        are dropped. Nothing is written if the set does not balance.

        Raises:
            UnbalancedEntryException: debits and credits differ
            AlreadyPostedException: the document already has a journal
            ValidationException: a line is negative or both debit and credit
        """
        if not entries:
            return None

        ref_type = _ref_name(ref_type)
        lines = [self._normalize_line(entry) for entry in entries]

        if not ensure_balanced(lines, settings.ledger_balance_tolerance):
            total_debit, total_credit = sum_entries(lines)
            logger.warning(
                f"Rejected unbalanced posting for {ref_type} {ref_id}: "
                f"debit={total_debit} credit={total_credit}"
            )
            raise UnbalancedEntryException(total_debit, total_credit)

        lines = [line for line in lines if line.debit != 0 or line.credit != 0]
        if not lines:
            return None

        if await self.is_already_posted(ref_type, ref_id):
            raise AlreadyPostedException(ref_type, ref_id)

        total_debit, total_credit = sum_entries(lines)

        journal = JournalEntry(
            entry_number=await next_document_number(self.db, JournalEntry.entry_number, "JE"),
            ref_type=ref_type,
            ref_id=ref_id,
            description=description,
            total_debit=total_debit,
            total_credit=total_credit,
        )
        self.db.add(journal)
        await self.db.flush()

        for idx, line in enumerate(lines, 1):
            self.db.add(LedgerEntry(
                journal_entry_id=journal.id,
                line_number=idx,
                ledger=line.ledger,
                debit=line.debit,
                credit=line.credit,
                ref_type=ref_type,
                ref_id=ref_id,
            ))

        await self.db.flush()

        logger.info(
            f"Posted {journal.entry_number} for {ref_type} {ref_id} "
            f"({len(lines)} lines, {total_debit})"
        )
        return journal

    def _normalize_line(self, entry: Union[PostingLine, Dict[str, Any]]) -> PostingLine:
        if isinstance(entry, dict):
            ledger = entry.get("ledger")
            debit = entry.get("debit")
            credit = entry.get("credit")
        else:
            ledger, debit, credit = entry.ledger, entry.debit, entry.credit

        if not ledger:
            raise ValidationException("Ledger name is required for every line", field="ledger")

        debit = quantize_money(to_decimal(debit))
        credit = quantize_money(to_decimal(credit))

        if debit < 0 or credit < 0:
            raise ValidationException(
                "Ledger amounts cannot be negative",
                field="amount",
                details={"ledger": _ledger_name(ledger)},
            )
        if debit > 0 and credit > 0:
            raise ValidationException(
                "A ledger line is either a debit or a credit",
                field="amount",
                details={"ledger": _ledger_name(ledger)},
            )

        return PostingLine(ledger=_ledger_name(ledger), debit=debit, credit=credit)

    # ===========================================
    # POSTING RECIPES
    # ===========================================

    async def post_goods_receipt(
        self,
        grn_id: uuid.UUID,
        grn_number: str,
        totals: DocumentTotals,
    ) -> Optional[JournalEntry]:
        """
        Post a GRN.

        Creates journal entry:
            Dr. Inventory (total)
                Cr. AP_Vendor (total)
        """
        return await self.post_entries(
            LedgerRefType.GRN,
            grn_id,
            [
                PostingLine(LedgerAccount.INVENTORY.value, debit=totals.total),
                PostingLine(LedgerAccount.AP_VENDOR.value, credit=totals.total),
            ],
            description=f"Goods received {grn_number}",
        )

    async def post_sales_invoice(
        self,
        invoice_id: uuid.UUID,
        invoice_number: str,
        totals: DocumentTotals,
    ) -> Optional[JournalEntry]:
        """
        Post a sales invoice.

        Creates journal entry:
            Dr. AR_Customer (total)
                Cr. Revenue (subtotal)
                Cr. GST_Payable (gst_total)
        """
        return await self.post_entries(
            LedgerRefType.INVOICE,
            invoice_id,
            [
                PostingLine(LedgerAccount.AR_CUSTOMER.value, debit=totals.total),
                PostingLine(LedgerAccount.REVENUE.value, credit=totals.subtotal),
                PostingLine(LedgerAccount.GST_PAYABLE.value, credit=totals.gst_total),
            ],
            description=f"Sales invoice {invoice_number}",
        )

    async def post_payment_in(
        self,
        payment_id: uuid.UUID,
        amount: Decimal,
    ) -> Optional[JournalEntry]:
        """
        Post a customer receipt.

        Creates journal entry:
            Dr. Cash_Bank (amount)
                Cr. AR_Customer (amount)
        """
        return await self.post_entries(
            LedgerRefType.PAYMENT_IN,
            payment_id,
            [
                PostingLine(LedgerAccount.CASH_BANK.value, debit=amount),
                PostingLine(LedgerAccount.AR_CUSTOMER.value, credit=amount),
            ],
            description="Payment received",
        )

    async def post_payment_out(
        self,
        payment_id: uuid.UUID,
        amount: Decimal,
    ) -> Optional[JournalEntry]:
        """
        Post a vendor payment.

        Creates journal entry:
            Dr. AP_Vendor (amount)
                Cr. Cash_Bank (amount)
        """
        return await self.post_entries(
            LedgerRefType.PAYMENT_OUT,
            payment_id,
            [
                PostingLine(LedgerAccount.AP_VENDOR.value, debit=amount),
                PostingLine(LedgerAccount.CASH_BANK.value, credit=amount),
            ],
            description="Vendor payment",
        )

    # ===========================================
    # QUERIES
    # ===========================================

    async def list_entries(
        self,
        ledger: Optional[str] = None,
        ref_type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[LedgerEntry]:
        """Ledger lines, newest first."""
        query = select(LedgerEntry)

        if ledger:
            query = query.where(LedgerEntry.ledger == ledger)
        if ref_type:
            query = query.where(LedgerEntry.ref_type == ref_type)

        query = query.order_by(
            desc(LedgerEntry.created_at),
            desc(LedgerEntry.journal_entry_id),
            LedgerEntry.line_number,
        )
        if limit:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_journal(
        self,
        ref_type: str,
        ref_id: uuid.UUID,
    ) -> Optional[tuple]:
        """Journal header and its lines for a source document."""
        result = await self.db.execute(
            select(JournalEntry).where(
                JournalEntry.ref_type == ref_type,
                JournalEntry.ref_id == ref_id,
            )
        )
        journal = result.scalar_one_or_none()
        if not journal:
            return None

        lines_result = await self.db.execute(
            select(LedgerEntry)
            .where(LedgerEntry.journal_entry_id == journal.id)
            .order_by(LedgerEntry.line_number)
        )
        return journal, list(lines_result.scalars().all())

    async def trial_balance(self) -> TrialBalance:
        """Debit and credit totals per ledger."""
        result = await self.db.execute(
            select(
                LedgerEntry.ledger,
                func.coalesce(func.sum(LedgerEntry.debit), 0),
                func.coalesce(func.sum(LedgerEntry.credit), 0),
            )
            .group_by(LedgerEntry.ledger)
            .order_by(LedgerEntry.ledger)
        )

        rows = [
            TrialBalanceRow(
                ledger=ledger,
                total_debit=quantize_money(to_decimal(debit)),
                total_credit=quantize_money(to_decimal(credit)),
            )
            for ledger, debit, credit in result.all()
        ]

        total_debit = sum((row.total_debit for row in rows), Decimal("0.00"))
        total_credit = sum((row.total_credit for row in rows), Decimal("0.00"))

        return TrialBalance(
            rows=rows,
            total_debit=total_debit,
            total_credit=total_credit,
            is_balanced=abs(total_debit - total_credit) < settings.ledger_balance_tolerance,
        )
