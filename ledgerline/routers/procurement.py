"""
Ledgerline - Procurement Router

API endpoints for purchase orders and goods received notes.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ledgerline.database import get_async_session
from ledgerline.services.procurement_service import ProcurementService
from ledgerline.schemas.common import CreatedResponse
from ledgerline.schemas.procurement import (
    GoodsReceiptCreate,
    PurchaseOrderCreate,
    PurchaseOrderItemResponse,
    PurchaseOrderResponse,
)


router = APIRouter()


# ===========================================
# PURCHASE ORDER ENDPOINTS
# ===========================================

@router.get(
    "/po",
    response_model=List[PurchaseOrderResponse],
    summary="List purchase orders",
)
async def list_purchase_orders(
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: AsyncSession = Depends(get_async_session),
):
    service = ProcurementService(db)
    orders = await service.list_purchase_orders(limit=limit)
    return [PurchaseOrderResponse.model_validate(po) for po in orders]


@router.post(
    "/po",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create purchase order",
)
async def create_purchase_order(
    request: PurchaseOrderCreate,
    db: AsyncSession = Depends(get_async_session),
):
    service = ProcurementService(db)
    po = await service.create_purchase_order(
        vendor_id=request.vendor_id,
        items=request.items,
        warehouse_id=request.warehouse_id,
        status=request.status,
        notes=request.notes,
    )
    return CreatedResponse(message="Purchase order created", id=po.id, number=po.po_number)


@router.get(
    "/po/{po_id}/items",
    response_model=List[PurchaseOrderItemResponse],
    summary="List purchase order items",
)
async def list_purchase_order_items(
    po_id: UUID,
    db: AsyncSession = Depends(get_async_session),
):
    service = ProcurementService(db)
    await service.get_purchase_order(po_id)
    items = await service.list_purchase_order_items(po_id)
    return [PurchaseOrderItemResponse.model_validate(item) for item in items]


# ===========================================
# GRN ENDPOINTS
# ===========================================

@router.post(
    "/grn",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Receive goods (GRN)",
)
async def create_grn(
    request: GoodsReceiptCreate,
    db: AsyncSession = Depends(get_async_session),
):
    """
    Receive goods against a purchase order.

    Moves stock in and posts Dr. Inventory / Cr. AP_Vendor in one
    transaction. Serialized products need one serial per unit.
    """
    service = ProcurementService(db)
    grn = await service.create_grn(
        po_id=request.po_id,
        items=request.items,
        warehouse_id=request.warehouse_id,
        received_by=request.received_by,
        remarks=request.remarks,
    )
    return CreatedResponse(message="GRN created", id=grn.id, number=grn.grn_number)
