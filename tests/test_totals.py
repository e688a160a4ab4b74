"""
Ledgerline - Document Totals Tests

Unit tests for GST totals, numeric coercion and the balance check.
"""

from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest

from ledgerline.services.totals import (
    compute_totals,
    ensure_balanced,
    line_totals,
    price_lines,
    to_decimal,
)


class TestToDecimal:
    """Test cases for numeric coercion."""

    @pytest.mark.parametrize("value", [None, "abc", "", float("nan"), float("inf"), Decimal("NaN")])
    def test_invalid_values_become_zero(self, value):
        assert to_decimal(value) == Decimal("0")

    def test_numeric_strings_and_floats(self):
        assert to_decimal("12.50") == Decimal("12.50")
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal(7) == Decimal("7")

    def test_booleans(self):
        assert to_decimal(True) == Decimal("1")
        assert to_decimal(False) == Decimal("0")


class TestComputeTotals:
    """Test cases for compute_totals."""

    def test_single_line_with_gst(self):
        totals = compute_totals([{"qty": 2, "unit_price": 100, "gst_rate": 18}])

        assert totals.subtotal == Decimal("200.00")
        assert totals.gst_total == Decimal("36.00")
        assert totals.total == Decimal("236.00")

    def test_alias_fields(self):
        """quantity, price and gst_percent are accepted as fallbacks."""
        totals = compute_totals([{"quantity": 3, "price": "10", "gst_percent": "5"}])

        assert totals.subtotal == Decimal("30.00")
        assert totals.gst_total == Decimal("1.50")
        assert totals.total == Decimal("31.50")

    def test_primary_field_wins_over_alias(self):
        totals = compute_totals([{"qty": 1, "quantity": 9, "unit_price": 10, "price": 99}])

        assert totals.subtotal == Decimal("10.00")

    def test_zero_quantity_and_price_fall_back_to_alias(self):
        totals = compute_totals([{"qty": 0, "quantity": 3, "unit_price": 0, "price": 10}])

        assert totals.subtotal == Decimal("30.00")

    def test_zero_gst_rate_is_kept(self):
        totals = compute_totals([{"qty": 1, "unit_price": 100, "gst_rate": 0, "gst_percent": 18}])

        assert totals.gst_total == Decimal("0.00")
        assert totals.total == Decimal("100.00")

    def test_attribute_objects(self):
        item = SimpleNamespace(qty=4, unit_price=Decimal("25"), gst_rate=Decimal("12"))
        totals = compute_totals([item])

        assert totals.subtotal == Decimal("100.00")
        assert totals.gst_total == Decimal("12.00")

    def test_empty_and_none(self):
        for items in ([], None):
            totals = compute_totals(items)
            assert totals.subtotal == Decimal("0.00")
            assert totals.gst_total == Decimal("0.00")
            assert totals.total == Decimal("0.00")

    def test_missing_values_count_as_zero(self):
        totals = compute_totals([{"qty": 5}, {"unit_price": 10}, {"qty": "x", "unit_price": 3}])

        assert totals.total == Decimal("0.00")

    def test_total_reconciles_after_rounding(self):
        items = [
            {"qty": 1, "unit_price": "0.335", "gst_rate": 18},
            {"qty": 3, "unit_price": "1.115", "gst_rate": 5},
        ]
        totals = compute_totals(items)

        assert totals.total == totals.subtotal + totals.gst_total
        assert totals.subtotal == Decimal("3.68")

    def test_line_totals(self):
        base, gst, total = line_totals({"qty": 2, "unit_price": "50", "gst_rate": "28"})

        assert base == Decimal("100")
        assert gst == Decimal("28")
        assert total == Decimal("128")


class TestEnsureBalanced:
    """Test cases for the debit/credit check."""

    def test_balanced(self):
        entries = [
            {"ledger": "AR_Customer", "debit": 236},
            {"ledger": "Revenue", "credit": 200},
            {"ledger": "GST_Payable", "credit": 36},
        ]
        assert ensure_balanced(entries) is True

    def test_unbalanced(self):
        entries = [{"debit": 100}, {"credit": 99}]
        assert ensure_balanced(entries) is False

    def test_within_tolerance(self):
        assert ensure_balanced([{"debit": "100.005"}, {"credit": "100.00"}]) is True

    def test_difference_equal_to_tolerance_is_unbalanced(self):
        assert ensure_balanced([{"debit": "100.01"}, {"credit": "100.00"}]) is False

    def test_empty_is_balanced(self):
        assert ensure_balanced([]) is True

    def test_non_numeric_amounts_are_zero(self):
        assert ensure_balanced([{"debit": "abc", "credit": None}]) is True


class TestPriceLines:
    """Test cases for price and GST fallbacks."""

    def test_fallback_order(self):
        product_id = uuid4()
        product = SimpleNamespace(unit_price=Decimal("90"), gst_percent=Decimal("12"))
        po_line = SimpleNamespace(unit_price=Decimal("80"), gst_rate=None)

        lines = price_lines(
            [{"product_id": product_id, "qty": 2}],
            products={product_id: product},
            fallback_lines={product_id: po_line},
        )

        assert lines[0].unit_price == Decimal("80.00")
        assert lines[0].gst_rate == Decimal("12")
        assert lines[0].qty == 2

    def test_item_values_win(self):
        product_id = uuid4()
        product = SimpleNamespace(unit_price=Decimal("90"), gst_percent=Decimal("12"))

        lines = price_lines(
            [{"product_id": product_id, "qty": 1, "unit_price": "75", "gst_rate": "0"}],
            products={product_id: product},
        )

        assert lines[0].unit_price == Decimal("75.00")
        assert lines[0].gst_rate == Decimal("0")

    def test_no_source_means_zero(self):
        lines = price_lines([{"product_id": uuid4(), "qty": 1}])

        assert lines[0].unit_price == Decimal("0.00")
        assert lines[0].gst_rate == Decimal("0")

    def test_gst_rate_rounded_to_stored_precision(self):
        lines = price_lines([{"product_id": uuid4(), "qty": 1000, "unit_price": 100, "gst_rate": "12.345"}])

        assert lines[0].gst_rate == Decimal("12.35")
        # Totals use the rounded rate the line is stored with
        assert compute_totals(lines).gst_total == Decimal("12350.00")

    def test_zero_price_falls_back_to_alias(self):
        product_id = uuid4()
        product = SimpleNamespace(unit_price=Decimal("90"), gst_percent=Decimal("12"))

        lines = price_lines(
            [{"product_id": product_id, "qty": 1, "unit_price": 0, "price": "40"}],
            products={product_id: product},
        )

        assert lines[0].unit_price == Decimal("40.00")
