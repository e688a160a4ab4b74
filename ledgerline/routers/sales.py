"""
Ledgerline - Sales Router

API endpoints for quotations, sales orders, deliveries and invoices.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ledgerline.database import get_async_session
from ledgerline.services.sales_service import SalesService
from ledgerline.services.totals import line_totals, quantize_money
from ledgerline.schemas.common import CreatedResponse, LineItemResponse
from ledgerline.schemas.sales import (
    DeliveryCreate,
    InvoiceCreate,
    InvoiceDetailResponse,
    InvoiceResponse,
    QuotationCreate,
    QuotationResponse,
    SalesOrderCreate,
    SalesOrderResponse,
)


router = APIRouter()


# ===========================================
# QUOTATION ENDPOINTS
# ===========================================

@router.get("/quotation", response_model=List[QuotationResponse], summary="List quotations")
async def list_quotations(
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: AsyncSession = Depends(get_async_session),
):
    quotations = await SalesService(db).list_quotations(limit=limit)
    return [QuotationResponse.model_validate(q) for q in quotations]


@router.post(
    "/quotation",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create quotation",
)
async def create_quotation(
    request: QuotationCreate,
    db: AsyncSession = Depends(get_async_session),
):
    quotation = await SalesService(db).create_quotation(
        customer_id=request.customer_id,
        items=request.items,
        status=request.status,
        notes=request.notes,
    )
    return CreatedResponse(message="Quotation created", id=quotation.id, number=quotation.quote_number)


# ===========================================
# SALES ORDER ENDPOINTS
# ===========================================

@router.get("/order", response_model=List[SalesOrderResponse], summary="List sales orders")
async def list_sales_orders(
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: AsyncSession = Depends(get_async_session),
):
    orders = await SalesService(db).list_sales_orders(limit=limit)
    return [SalesOrderResponse.model_validate(o) for o in orders]


@router.post(
    "/order",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create sales order",
)
async def create_sales_order(
    request: SalesOrderCreate,
    db: AsyncSession = Depends(get_async_session),
):
    order = await SalesService(db).create_sales_order(
        customer_id=request.customer_id,
        items=request.items,
        quotation_id=request.quotation_id,
        status=request.status,
        notes=request.notes,
    )
    return CreatedResponse(message="Sales order created", id=order.id, number=order.so_number)


# ===========================================
# DELIVERY ENDPOINTS
# ===========================================

@router.post(
    "/delivery",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create delivery challan",
)
async def create_delivery(
    request: DeliveryCreate,
    db: AsyncSession = Depends(get_async_session),
):
    """
    Dispatch goods against a sales order (UUID or SO number).

    Moves stock out; serialized products need one in-stock serial per unit.
    """
    delivery = await SalesService(db).create_delivery(
        sales_order_id=request.sales_order_id,
        items=request.items,
        warehouse_id=request.warehouse_id,
        notes=request.notes,
    )
    return CreatedResponse(message="Delivery created", id=delivery.id, number=delivery.dc_number)


# ===========================================
# INVOICE ENDPOINTS
# ===========================================

@router.get("/invoice", response_model=List[InvoiceResponse], summary="List invoices")
async def list_invoices(
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: AsyncSession = Depends(get_async_session),
):
    invoices = await SalesService(db).list_invoices(limit=limit)
    return [InvoiceResponse.model_validate(i) for i in invoices]


@router.post(
    "/invoice",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create invoice",
)
async def create_invoice(
    request: InvoiceCreate,
    db: AsyncSession = Depends(get_async_session),
):
    """Issue an invoice and post Dr. AR_Customer / Cr. Revenue / Cr. GST_Payable."""
    invoice = await SalesService(db).create_invoice(
        customer_id=request.customer_id,
        items=request.items,
        delivery_id=request.delivery_id,
        notes=request.notes,
    )
    return CreatedResponse(message="Invoice created", id=invoice.id, number=invoice.invoice_number)


@router.get(
    "/invoice/{invoice_id}",
    response_model=InvoiceDetailResponse,
    summary="Get invoice with payment status",
)
async def get_invoice(
    invoice_id: str,
    db: AsyncSession = Depends(get_async_session),
):
    """Get an invoice by UUID or invoice number, with amount paid and outstanding."""
    invoice, items, amount_paid, outstanding = await SalesService(db).get_invoice(invoice_id)

    lines = []
    for item in items:
        base, gst, total = line_totals(item)
        lines.append(LineItemResponse(
            id=item.id,
            product_id=item.product_id,
            quantity=item.quantity,
            unit_price=float(item.unit_price),
            gst_rate=float(item.gst_rate),
            line_subtotal=float(quantize_money(base)),
            line_gst=float(quantize_money(gst)),
            line_total=float(quantize_money(total)),
        ))

    return InvoiceDetailResponse(
        **InvoiceResponse.model_validate(invoice).model_dump(),
        items=lines,
        amount_paid=float(amount_paid),
        outstanding=float(outstanding),
    )
