"""
Ledgerline - Inventory Router

Read-only views of the stock ledger and on-hand balances.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ledgerline.database import get_async_session
from ledgerline.services.stock_service import StockService
from ledgerline.schemas.accounting import StockBalanceResponse, StockLedgerEntryResponse


router = APIRouter()


@router.get(
    "/stock-ledger",
    response_model=List[StockLedgerEntryResponse],
    summary="Stock ledger",
)
async def list_stock_ledger(
    product_id: Optional[UUID] = Query(None),
    warehouse_id: Optional[UUID] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    db: AsyncSession = Depends(get_async_session),
):
    """Stock movements, newest first, optionally filtered by product and warehouse."""
    rows = await StockService(db).list_stock_ledger(
        product_id=product_id,
        warehouse_id=warehouse_id,
        limit=limit,
    )
    return [
        StockLedgerEntryResponse(
            id=row.id,
            ref_type=row.ref_type,
            ref_id=row.ref_id,
            product_id=row.product_id,
            product_name=product_name,
            warehouse_id=row.warehouse_id,
            quantity=row.quantity,
            qty_delta=row.qty_delta,
            serials=row.serials or [],
            created_at=row.created_at,
        )
        for row, product_name in rows
    ]


@router.get(
    "/balances",
    response_model=List[StockBalanceResponse],
    summary="On-hand stock",
)
async def list_balances(
    product_id: Optional[UUID] = Query(None),
    warehouse_id: Optional[UUID] = Query(None),
    db: AsyncSession = Depends(get_async_session),
):
    rows = await StockService(db).list_balances(product_id=product_id, warehouse_id=warehouse_id)
    return [
        StockBalanceResponse(
            product_id=balance.product_id,
            product_name=product_name,
            warehouse_id=balance.warehouse_id,
            quantity=balance.quantity,
            version=balance.version,
        )
        for balance, product_name in rows
    ]
