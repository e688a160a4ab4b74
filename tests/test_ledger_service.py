"""
Ledgerline - Ledger Service Tests

Tests for journal posting, the one-journal-per-document rule and the
trial balance.
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from ledgerline.models import JournalEntry, LedgerEntry
from ledgerline.services.ledger_service import LedgerService, PostingLine
from ledgerline.services.totals import DocumentTotals
from ledgerline.utils.error_handling import (
    AlreadyPostedException,
    UnbalancedEntryException,
    ValidationException,
)


async def _count(db_session, model) -> int:
    result = await db_session.execute(select(func.count()).select_from(model))
    return result.scalar()


class TestPostEntries:
    """Test cases for LedgerService.post_entries."""

    @pytest.mark.asyncio
    async def test_post_balanced_entries(self, db_session):
        service = LedgerService(db_session)
        ref_id = uuid4()

        journal = await service.post_entries(
            "INVOICE",
            ref_id,
            [
                PostingLine("AR_Customer", debit=Decimal("236")),
                PostingLine("Revenue", credit=Decimal("200")),
                PostingLine("GST_Payable", credit=Decimal("36")),
            ],
        )
        await db_session.commit()

        assert journal is not None
        assert journal.entry_number.startswith("JE-")
        assert journal.total_debit == Decimal("236.00")
        assert journal.total_credit == Decimal("236.00")

        _, lines = await service.get_journal("INVOICE", ref_id)
        assert [line.ledger for line in lines] == ["AR_Customer", "Revenue", "GST_Payable"]
        assert [line.line_number for line in lines] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_empty_entries_is_noop(self, db_session):
        service = LedgerService(db_session)

        assert await service.post_entries("GRN", uuid4(), []) is None
        assert await _count(db_session, JournalEntry) == 0

    @pytest.mark.asyncio
    async def test_unbalanced_entries_write_nothing(self, db_session):
        service = LedgerService(db_session)

        with pytest.raises(UnbalancedEntryException) as exc_info:
            await service.post_entries(
                "GRN",
                uuid4(),
                [
                    {"ledger": "Inventory", "debit": 100},
                    {"ledger": "AP_Vendor", "credit": 90},
                ],
            )

        assert exc_info.value.message == "Ledger not balanced (debit/credit mismatch)"
        assert exc_info.value.status_code == 422
        assert await _count(db_session, JournalEntry) == 0
        assert await _count(db_session, LedgerEntry) == 0

    @pytest.mark.asyncio
    async def test_zero_lines_are_dropped(self, db_session):
        service = LedgerService(db_session)
        ref_id = uuid4()

        await service.post_sales_invoice(
            ref_id,
            "INV-TEST",
            DocumentTotals(subtotal=Decimal("50.00"), gst_total=Decimal("0.00"), total=Decimal("50.00")),
        )
        await db_session.commit()

        _, lines = await service.get_journal("INVOICE", ref_id)
        assert [line.ledger for line in lines] == ["AR_Customer", "Revenue"]

    @pytest.mark.asyncio
    async def test_all_zero_posts_nothing(self, db_session):
        service = LedgerService(db_session)

        journal = await service.post_payment_in(uuid4(), Decimal("0"))

        assert journal is None
        assert await _count(db_session, JournalEntry) == 0

    @pytest.mark.asyncio
    async def test_line_with_debit_and_credit_rejected(self, db_session):
        service = LedgerService(db_session)

        with pytest.raises(ValidationException):
            await service.post_entries(
                "GRN",
                uuid4(),
                [{"ledger": "Inventory", "debit": 10, "credit": 10}],
            )

    @pytest.mark.asyncio
    async def test_negative_amount_rejected(self, db_session):
        service = LedgerService(db_session)

        with pytest.raises(ValidationException):
            await service.post_entries(
                "GRN",
                uuid4(),
                [
                    {"ledger": "Inventory", "debit": -10},
                    {"ledger": "AP_Vendor", "credit": -10},
                ],
            )

    @pytest.mark.asyncio
    async def test_document_posted_only_once(self, db_session):
        service = LedgerService(db_session)
        payment_id = uuid4()

        await service.post_payment_in(payment_id, Decimal("500"))
        await db_session.commit()

        with pytest.raises(AlreadyPostedException) as exc_info:
            await service.post_payment_in(payment_id, Decimal("500"))

        assert exc_info.value.status_code == 409
        assert await _count(db_session, JournalEntry) == 1

    @pytest.mark.asyncio
    async def test_entry_numbers_are_sequential(self, db_session):
        service = LedgerService(db_session)

        first = await service.post_payment_out(uuid4(), Decimal("10"))
        second = await service.post_payment_out(uuid4(), Decimal("20"))
        await db_session.commit()

        assert first.entry_number.endswith("-00001")
        assert second.entry_number.endswith("-00002")


class TestPostingRecipes:
    """Test cases for the per-document posting recipes."""

    @pytest.mark.asyncio
    async def test_goods_receipt_recipe(self, db_session):
        service = LedgerService(db_session)
        grn_id = uuid4()

        await service.post_goods_receipt(
            grn_id,
            "GRN-TEST",
            DocumentTotals(subtotal=Decimal("1000.00"), gst_total=Decimal("180.00"), total=Decimal("1180.00")),
        )
        await db_session.commit()

        _, lines = await service.get_journal("GRN", grn_id)
        assert [(l.ledger, l.debit, l.credit) for l in lines] == [
            ("Inventory", Decimal("1180.00"), Decimal("0.00")),
            ("AP_Vendor", Decimal("0.00"), Decimal("1180.00")),
        ]

    @pytest.mark.asyncio
    async def test_payment_recipes(self, db_session):
        service = LedgerService(db_session)
        pay_in, pay_out = uuid4(), uuid4()

        await service.post_payment_in(pay_in, Decimal("300"))
        await service.post_payment_out(pay_out, Decimal("120"))
        await db_session.commit()

        _, in_lines = await service.get_journal("PAYMENT_IN", pay_in)
        _, out_lines = await service.get_journal("PAYMENT_OUT", pay_out)

        assert [(l.ledger, l.debit) for l in in_lines if l.debit] == [("Cash_Bank", Decimal("300.00"))]
        assert [(l.ledger, l.credit) for l in in_lines if l.credit] == [("AR_Customer", Decimal("300.00"))]
        assert [(l.ledger, l.debit) for l in out_lines if l.debit] == [("AP_Vendor", Decimal("120.00"))]
        assert [(l.ledger, l.credit) for l in out_lines if l.credit] == [("Cash_Bank", Decimal("120.00"))]


class TestLedgerQueries:
    """Test cases for ledger listing and trial balance."""

    @pytest.mark.asyncio
    async def test_list_entries_filters(self, db_session):
        service = LedgerService(db_session)

        await service.post_payment_in(uuid4(), Decimal("300"))
        await service.post_payment_out(uuid4(), Decimal("120"))
        await db_session.commit()

        cash_lines = await service.list_entries(ledger="Cash_Bank")
        assert len(cash_lines) == 2

        payment_in_lines = await service.list_entries(ref_type="PAYMENT_IN")
        assert {line.ledger for line in payment_in_lines} == {"Cash_Bank", "AR_Customer"}

        assert len(await service.list_entries(limit=1)) == 1

    @pytest.mark.asyncio
    async def test_trial_balance(self, db_session):
        service = LedgerService(db_session)

        await service.post_goods_receipt(
            uuid4(),
            "GRN-TEST",
            DocumentTotals(subtotal=Decimal("100.00"), gst_total=Decimal("18.00"), total=Decimal("118.00")),
        )
        await service.post_payment_out(uuid4(), Decimal("50"))
        await db_session.commit()

        tb = await service.trial_balance()
        rows = {row.ledger: row for row in tb.rows}

        assert tb.is_balanced is True
        assert tb.total_debit == tb.total_credit == Decimal("168.00")
        assert rows["Inventory"].balance == Decimal("118.00")
        assert rows["AP_Vendor"].balance == Decimal("-68.00")
        assert rows["Cash_Bank"].balance == Decimal("-50.00")

    @pytest.mark.asyncio
    async def test_get_journal_missing(self, db_session):
        assert await LedgerService(db_session).get_journal("GRN", uuid4()) is None
