"""
Ledgerline - Payments Router
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ledgerline.database import get_async_session
from ledgerline.models.payment import PaymentType
from ledgerline.services.payment_service import PaymentService
from ledgerline.schemas.common import CreatedResponse
from ledgerline.schemas.payments import PaymentInCreate, PaymentOutCreate, PaymentResponse


router = APIRouter()


@router.post(
    "/in",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record customer payment",
)
async def record_payment_in(
    request: PaymentInCreate,
    db: AsyncSession = Depends(get_async_session),
):
    """
    Record a receipt against an invoice (UUID or invoice number).

    Posts Dr. Cash_Bank / Cr. AR_Customer.
    """
    payment = await PaymentService(db).record_payment_in(
        invoice_id=request.invoice_id,
        amount=request.amount,
        customer_id=request.customer_id,
        mode=request.mode,
        currency=request.currency,
        payment_date=request.payment_date,
        notes=request.notes,
    )
    return CreatedResponse(message="Payment recorded", id=payment.id)


@router.post(
    "/out",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record vendor payment",
)
async def record_payment_out(
    request: PaymentOutCreate,
    db: AsyncSession = Depends(get_async_session),
):
    """Record a payment to a vendor. Posts Dr. AP_Vendor / Cr. Cash_Bank."""
    payment = await PaymentService(db).record_payment_out(
        vendor_id=request.vendor_id,
        amount=request.amount,
        po_id=request.po_id,
        grn_id=request.grn_id,
        mode=request.mode,
        currency=request.currency,
        payment_date=request.payment_date,
        notes=request.notes,
    )
    return CreatedResponse(message="Payment recorded", id=payment.id)


@router.get("", response_model=List[PaymentResponse], summary="List payments")
async def list_payments(
    type: Optional[PaymentType] = Query(None, description="in or out"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    db: AsyncSession = Depends(get_async_session),
):
    payments = await PaymentService(db).list_payments(payment_type=type, limit=limit)
    return [PaymentResponse.model_validate(p) for p in payments]
