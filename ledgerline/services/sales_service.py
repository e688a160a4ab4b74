"""
Ledgerline - Sales Service

Quotation -> sales order -> delivery challan -> invoice.

- Deliveries move stock out (serials marked delivered); no ledger posting.
- Invoices post Dr. AR_Customer / Cr. Revenue / Cr. GST_Payable in the
  same unit of work as the invoice itself.
"""

import logging
import uuid
from decimal import Decimal
from typing import Any, List, Optional, Sequence, Tuple, Union

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledgerline.config import settings
from ledgerline.models.payment import Payment, PaymentType
from ledgerline.models.sales import (
    DeliveryChallan,
    DeliveryChallanItem,
    SalesInvoice,
    SalesInvoiceItem,
    SalesOrder,
    SalesOrderItem,
    SalesQuotation,
    SalesQuotationItem,
)
from ledgerline.models.stock import StockRefType
from ledgerline.services.ledger_service import LedgerService
from ledgerline.services.masters_service import MastersService
from ledgerline.services.numbering import next_document_number
from ledgerline.services.references import resolve_document
from ledgerline.services.stock_service import StockMovement, StockService
from ledgerline.services.totals import ZERO, compute_totals, price_lines, quantize_money, to_decimal
from ledgerline.utils.error_handling import NotFoundException, ValidationException

logger = logging.getLogger(__name__)


class SalesService:
    """Service for the sales document flow."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.masters = MastersService(db)
        self.stock = StockService(db)
        self.ledger = LedgerService(db)

    async def _priced_lines(self, items: Sequence[Any]):
        products = await self.stock.get_products_map(item.product_id for item in items)
        return price_lines(items, products)

    # ===========================================
    # QUOTATIONS
    # ===========================================

    async def create_quotation(
        self,
        customer_id: uuid.UUID,
        items: Sequence[Any],
        status: str = "draft",
        notes: Optional[str] = None,
    ) -> SalesQuotation:
        if not customer_id or not items:
            raise ValidationException("customer_id and items are required")

        try:
            await self.masters.get_customer(customer_id)
            lines = await self._priced_lines(items)
            totals = compute_totals(lines)

            quotation = SalesQuotation(
                quote_number=await next_document_number(self.db, SalesQuotation.quote_number, "Q"),
                customer_id=customer_id,
                status=status or "draft",
                notes=notes,
                **totals.as_dict(),
            )
            self.db.add(quotation)
            await self.db.flush()

            for line in lines:
                self.db.add(SalesQuotationItem(
                    quotation_id=quotation.id,
                    product_id=line.product_id,
                    quantity=line.qty,
                    unit_price=line.unit_price,
                    gst_rate=line.gst_rate,
                ))

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(quotation)
        logger.info(f"Created quotation {quotation.quote_number} (total {quotation.total})")
        return quotation

    async def list_quotations(self, limit: Optional[int] = None) -> List[SalesQuotation]:
        result = await self.db.execute(
            select(SalesQuotation)
            .order_by(desc(SalesQuotation.created_at), desc(SalesQuotation.quote_number))
            .limit(limit or settings.list_default_limit)
        )
        return list(result.scalars().all())

    # ===========================================
    # SALES ORDERS
    # ===========================================

    async def create_sales_order(
        self,
        customer_id: uuid.UUID,
        items: Sequence[Any],
        quotation_id: Optional[uuid.UUID] = None,
        status: str = "draft",
        notes: Optional[str] = None,
    ) -> SalesOrder:
        if not customer_id or not items:
            raise ValidationException("customer_id and items are required")

        try:
            await self.masters.get_customer(customer_id)
            if quotation_id and not await self.db.get(SalesQuotation, quotation_id):
                raise NotFoundException("SalesQuotation", quotation_id)

            lines = await self._priced_lines(items)
            totals = compute_totals(lines)

            order = SalesOrder(
                so_number=await next_document_number(self.db, SalesOrder.so_number, "SO"),
                customer_id=customer_id,
                quotation_id=quotation_id,
                status=status or "draft",
                notes=notes,
                **totals.as_dict(),
            )
            self.db.add(order)
            await self.db.flush()

            for line in lines:
                self.db.add(SalesOrderItem(
                    sales_order_id=order.id,
                    product_id=line.product_id,
                    quantity=line.qty,
                    unit_price=line.unit_price,
                    gst_rate=line.gst_rate,
                ))

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(order)
        logger.info(f"Created sales order {order.so_number} (total {order.total})")
        return order

    async def list_sales_orders(self, limit: Optional[int] = None) -> List[SalesOrder]:
        result = await self.db.execute(
            select(SalesOrder)
            .order_by(desc(SalesOrder.created_at), desc(SalesOrder.so_number))
            .limit(limit or settings.list_default_limit)
        )
        return list(result.scalars().all())

    async def resolve_sales_order(self, reference: Union[str, uuid.UUID]) -> SalesOrder:
        """Find a sales order by UUID or SO number."""
        order = await resolve_document(self.db, SalesOrder, SalesOrder.so_number, reference)
        if not order:
            raise NotFoundException(
                "SalesOrder",
                message="Invalid sales_order_id/so_number",
            )
        return order

    # ===========================================
    # DELIVERIES
    # ===========================================

    async def create_delivery(
        self,
        sales_order_id: Union[str, uuid.UUID],
        items: Sequence[Any],
        warehouse_id: Optional[uuid.UUID] = None,
        notes: Optional[str] = None,
    ) -> DeliveryChallan:
        """
        Dispatch goods against a sales order.

        Each line ships from its own warehouse, else the challan's, else
        the product's default warehouse.

        Raises:
            NotFoundException: unknown sales order or product
            SerialNumberException: serials missing, duplicated or not in stock
            InsufficientStockException: not enough on hand
        """
        if not sales_order_id or not items:
            raise ValidationException("sales_order_id and items are required")

        try:
            order = await self.resolve_sales_order(sales_order_id)
            if warehouse_id:
                await self.masters.get_warehouse(warehouse_id)

            products = await self.stock.validate_serials(items)
            lines = price_lines(items, products)

            order_item_ids = set(
                (await self.db.execute(
                    select(SalesOrderItem.id).where(SalesOrderItem.sales_order_id == order.id)
                )).scalars().all()
            )
            for line in lines:
                if line.sales_order_item_id and line.sales_order_item_id not in order_item_ids:
                    raise ValidationException(
                        "sales_order_item_id does not belong to this sales order",
                        field="sales_order_item_id",
                        details={"sales_order_item_id": str(line.sales_order_item_id)},
                    )

            delivery = DeliveryChallan(
                dc_number=await next_document_number(self.db, DeliveryChallan.dc_number, "DC"),
                sales_order_id=order.id,
                warehouse_id=warehouse_id,
                notes=notes,
            )
            self.db.add(delivery)
            await self.db.flush()

            movements = []
            for line in lines:
                line_warehouse = (
                    line.warehouse_id
                    or warehouse_id
                    or products[line.product_id].default_warehouse_id
                )
                self.db.add(DeliveryChallanItem(
                    delivery_challan_id=delivery.id,
                    sales_order_item_id=line.sales_order_item_id,
                    product_id=line.product_id,
                    warehouse_id=line_warehouse,
                    qty=line.qty,
                    serials=line.serials,
                ))
                movements.append(StockMovement(
                    product_id=line.product_id,
                    qty_delta=-line.qty,
                    warehouse_id=line_warehouse,
                    serials=line.serials,
                ))
            await self.db.flush()

            await self.stock.apply_movements(StockRefType.DELIVERY, delivery.id, movements, products)

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(delivery)
        logger.info(f"Created delivery {delivery.dc_number} for {order.so_number}")
        return delivery

    async def list_delivery_items(self, delivery_id: uuid.UUID) -> List[DeliveryChallanItem]:
        result = await self.db.execute(
            select(DeliveryChallanItem)
            .where(DeliveryChallanItem.delivery_challan_id == delivery_id)
            .order_by(DeliveryChallanItem.created_at)
        )
        return list(result.scalars().all())

    # ===========================================
    # INVOICES
    # ===========================================

    async def create_invoice(
        self,
        customer_id: uuid.UUID,
        items: Sequence[Any],
        delivery_id: Optional[uuid.UUID] = None,
        notes: Optional[str] = None,
    ) -> SalesInvoice:
        """
        Issue an invoice and post it.

        Missing GST rates come from the product master.

        Creates journal entry:
            Dr. AR_Customer (total)
                Cr. Revenue (subtotal)
                Cr. GST_Payable (gst_total)
        """
        if not customer_id or not items:
            raise ValidationException("customer_id and items are required")

        try:
            await self.masters.get_customer(customer_id)
            if delivery_id and not await self.db.get(DeliveryChallan, delivery_id):
                raise NotFoundException("DeliveryChallan", delivery_id)

            lines = await self._priced_lines(items)
            totals = compute_totals(lines)

            invoice = SalesInvoice(
                invoice_number=await next_document_number(self.db, SalesInvoice.invoice_number, "INV"),
                customer_id=customer_id,
                delivery_id=delivery_id,
                status="issued",
                notes=notes,
                **totals.as_dict(),
            )
            self.db.add(invoice)
            await self.db.flush()

            for line in lines:
                self.db.add(SalesInvoiceItem(
                    sales_invoice_id=invoice.id,
                    product_id=line.product_id,
                    quantity=line.qty,
                    unit_price=line.unit_price,
                    gst_rate=line.gst_rate,
                ))
            await self.db.flush()

            await self.ledger.post_sales_invoice(invoice.id, invoice.invoice_number, totals)

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(invoice)
        logger.info(f"Created invoice {invoice.invoice_number} (total {invoice.total})")
        return invoice

    async def list_invoices(self, limit: Optional[int] = None) -> List[SalesInvoice]:
        result = await self.db.execute(
            select(SalesInvoice)
            .order_by(desc(SalesInvoice.created_at), desc(SalesInvoice.invoice_number))
            .limit(limit or settings.list_default_limit)
        )
        return list(result.scalars().all())

    async def resolve_invoice(self, reference: Union[str, uuid.UUID]) -> SalesInvoice:
        """Find an invoice by UUID or invoice number."""
        invoice = await resolve_document(self.db, SalesInvoice, SalesInvoice.invoice_number, reference)
        if not invoice:
            raise NotFoundException(
                "SalesInvoice",
                message="Invalid invoice_id/invoice_number",
            )
        return invoice

    async def get_amount_paid(self, invoice_id: uuid.UUID) -> Decimal:
        result = await self.db.execute(
            select(func.coalesce(func.sum(Payment.amount), 0)).where(
                Payment.type == PaymentType.IN,
                Payment.reference_type == "invoice",
                Payment.reference_id == invoice_id,
            )
        )
        return quantize_money(to_decimal(result.scalar()))

    async def get_invoice(
        self,
        reference: Union[str, uuid.UUID],
    ) -> Tuple[SalesInvoice, List[SalesInvoiceItem], Decimal, Decimal]:
        """
        Invoice with its lines, amount paid and outstanding balance.

        Outstanding never goes below zero.
        """
        invoice = await self.resolve_invoice(reference)

        result = await self.db.execute(
            select(SalesInvoiceItem)
            .where(SalesInvoiceItem.sales_invoice_id == invoice.id)
            .order_by(SalesInvoiceItem.created_at)
        )
        items = list(result.scalars().all())

        amount_paid = await self.get_amount_paid(invoice.id)
        outstanding = max(ZERO, quantize_money(to_decimal(invoice.total) - amount_paid))
        return invoice, items, amount_paid, outstanding
