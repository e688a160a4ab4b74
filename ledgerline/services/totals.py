"""
Ledgerline - Document Totals

Pure helpers shared by every document flow:
- GST-inclusive totals for line items
- Debit/credit balance check for journals

Items and entries may be mappings (request payloads) or objects
(schemas, ORM rows). Missing or non-numeric values count as zero.
"""

import math
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional, Tuple


TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")
DEFAULT_TOLERANCE = Decimal("0.01")


@dataclass(frozen=True)
class DocumentTotals:
    """Totals of a priced document."""
    subtotal: Decimal
    gst_total: Decimal
    total: Decimal

    def as_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "gst_total": self.gst_total,
            "total": self.total,
        }


def to_decimal(value: Any) -> Decimal:
    """
    Coerce a value to Decimal.

    None, non-numeric strings, NaN and infinities become zero; booleans
    count as 1 and 0.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, Decimal):
        return value if value.is_finite() else Decimal("0")
    if isinstance(value, float):
        if not math.isfinite(value):
            return Decimal("0")
        return Decimal(str(value))
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")
    return result if result.is_finite() else Decimal("0")


def quantize_money(value: Decimal) -> Decimal:
    """Round to 2 decimal places, half up."""
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _pick(item: Any, *names: str) -> Any:
    """First non-empty value among the given keys/attributes."""
    for name in names:
        if isinstance(item, dict):
            value = item.get(name)
        else:
            value = getattr(item, name, None)
        if value is not None and value != "":
            return value
    return None


def pick_nonzero(item: Any, *names: str) -> Any:
    """
    Like _pick, but a zero moves on to the next key.

    A zero is returned only when no later key holds a non-zero value.
    """
    fallback = None
    for name in names:
        value = _pick(item, name)
        if value is None:
            continue
        if to_decimal(value) != 0:
            return value
        if fallback is None:
            fallback = value
    return fallback


def quantize_rate(value: Decimal) -> Decimal:
    """Round a GST percentage to the 2 places it is stored with."""
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def line_totals(item: Any) -> Tuple[Decimal, Decimal, Decimal]:
    """
    Unrounded (base, gst, total) of a single line.

    Quantity is read from qty/quantity and price from unit_price/price,
    where a zero falls through to the alternate key. The rate is read
    from gst_rate/gst_percent, where a zero rate is kept.
    """
    qty = to_decimal(pick_nonzero(item, "qty", "quantity"))
    price = to_decimal(pick_nonzero(item, "unit_price", "price"))
    rate = to_decimal(_pick(item, "gst_rate", "gst_percent"))

    base = qty * price
    gst = base * rate / Decimal("100")
    return base, gst, base + gst


def compute_totals(items: Optional[Iterable[Any]] = None) -> DocumentTotals:
    """
    Compute subtotal, GST and grand total for a list of line items.

    Lines are summed unrounded; subtotal and gst_total are rounded once,
    and total is their sum so it always reconciles exactly.
    """
    subtotal = Decimal("0")
    gst_total = Decimal("0")

    for item in items or []:
        base, gst, _ = line_totals(item)
        subtotal += base
        gst_total += gst

    subtotal = quantize_money(subtotal)
    gst_total = quantize_money(gst_total)
    return DocumentTotals(
        subtotal=subtotal,
        gst_total=gst_total,
        total=subtotal + gst_total,
    )


def sum_entries(entries: Optional[Iterable[Any]] = None) -> Tuple[Decimal, Decimal]:
    """Total debit and total credit of a list of ledger lines."""
    total_debit = Decimal("0")
    total_credit = Decimal("0")
    for entry in entries or []:
        total_debit += to_decimal(_pick(entry, "debit"))
        total_credit += to_decimal(_pick(entry, "credit"))
    return total_debit, total_credit


def ensure_balanced(
    entries: Optional[Iterable[Any]] = None,
    tolerance: Decimal = DEFAULT_TOLERANCE,
) -> bool:
    """True when debits and credits differ by less than the tolerance."""
    total_debit, total_credit = sum_entries(entries)
    return abs(total_debit - total_credit) < to_decimal(tolerance)


@dataclass
class PricedLine:
    """A document line with its price and GST rate resolved."""
    product_id: Any
    qty: int
    unit_price: Decimal
    gst_rate: Decimal
    serials: List[str] = field(default_factory=list)
    warehouse_id: Any = None
    sales_order_item_id: Any = None


def price_lines(
    items: Iterable[Any],
    products: Optional[Dict[Any, Any]] = None,
    fallback_lines: Optional[Dict[Any, Any]] = None,
) -> List[PricedLine]:
    """
    Fill in missing unit prices and GST rates.

    Each value is taken from the item, then the fallback line for the same
    product (e.g. the PO line), then the product master, then zero.
    """
    products = products or {}
    fallback_lines = fallback_lines or {}
    priced = []

    for item in items:
        product_id = _pick(item, "product_id")
        sources = [item, fallback_lines.get(product_id), products.get(product_id)]

        unit_price = None
        gst_rate = None
        for source in sources:
            if source is None:
                continue
            if unit_price is None:
                unit_price = pick_nonzero(source, "unit_price", "price")
            if gst_rate is None:
                gst_rate = _pick(source, "gst_rate", "gst_percent")

        priced.append(PricedLine(
            product_id=product_id,
            qty=int(to_decimal(pick_nonzero(item, "qty", "quantity", "quantity_received"))),
            unit_price=quantize_money(to_decimal(unit_price)),
            gst_rate=quantize_rate(to_decimal(gst_rate)),
            serials=[str(s).strip() for s in (_pick(item, "serials") or [])],
            warehouse_id=_pick(item, "warehouse_id"),
            sales_order_item_id=_pick(item, "sales_order_item_id"),
        ))

    return priced
