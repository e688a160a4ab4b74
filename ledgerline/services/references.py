"""
Ledgerline - Document References

Clients may refer to a document by its UUID or by its human number
(SO-2026-00001, INV-2026-00003, ...).
"""

import uuid
from typing import Any, Optional, Type, TypeVar, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

T = TypeVar("T")


def parse_uuid(value: Any) -> Optional[uuid.UUID]:
    """Return the value as a UUID, or None if it is not one."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (ValueError, AttributeError, TypeError):
        return None


async def resolve_document(
    db: AsyncSession,
    model: Type[T],
    number_column: InstrumentedAttribute,
    reference: Union[str, uuid.UUID, None],
) -> Optional[T]:
    """Look a document up by UUID first, then by its number."""
    if reference is None or str(reference).strip() == "":
        return None

    doc_id = parse_uuid(reference)
    if doc_id:
        document = await db.get(model, doc_id)
        if document:
            return document

    result = await db.execute(
        select(model).where(number_column == str(reference).strip())
    )
    return result.scalar_one_or_none()
