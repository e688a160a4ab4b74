"""
Ledgerline - Document Numbering

Sequential, year-scoped document numbers such as PO-2026-00001.
"""

from datetime import date
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute


async def next_document_number(
    db: AsyncSession,
    column: InstrumentedAttribute,
    prefix: str,
    on_date: Optional[date] = None,
) -> str:
    """
    Generate the next number for a document series.
    
    Counts existing numbers with the same prefix and year; the column's
    unique constraint rejects a duplicate issued by a concurrent request.
    """
    year = (on_date or date.today()).year
    pattern = f"{prefix}-{year}-%"
    
    result = await db.execute(
        select(func.count()).where(column.like(pattern))
    )
    count = result.scalar() or 0
    
    return f"{prefix}-{year}-{str(count + 1).zfill(5)}"
