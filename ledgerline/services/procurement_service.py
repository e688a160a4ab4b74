"""
Ledgerline - Procurement Service

Purchase orders and goods received notes.

Receiving goods is one unit of work:
    GRN + items -> stock ledger (+qty, serials) -> Dr. Inventory / Cr. AP_Vendor
Any failure rolls the whole receipt back.
"""

import logging
import uuid
from datetime import date
from typing import Any, List, Optional, Sequence

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledgerline.config import settings
from ledgerline.models.procurement import (
    GoodsReceipt,
    GoodsReceiptItem,
    PurchaseOrder,
    PurchaseOrderItem,
)
from ledgerline.models.stock import StockRefType
from ledgerline.services.ledger_service import LedgerService
from ledgerline.services.masters_service import MastersService
from ledgerline.services.numbering import next_document_number
from ledgerline.services.stock_service import StockMovement, StockService
from ledgerline.services.totals import compute_totals, price_lines
from ledgerline.utils.error_handling import NotFoundException, ValidationException

logger = logging.getLogger(__name__)


class ProcurementService:
    """Service for purchase orders and goods receipts."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.masters = MastersService(db)
        self.stock = StockService(db)
        self.ledger = LedgerService(db)

    # ===========================================
    # PURCHASE ORDERS
    # ===========================================

    async def create_purchase_order(
        self,
        vendor_id: uuid.UUID,
        items: Sequence[Any],
        warehouse_id: Optional[uuid.UUID] = None,
        status: str = "draft",
        notes: Optional[str] = None,
    ) -> PurchaseOrder:
        """
        Raise a purchase order on a vendor.

        Missing prices and GST rates come from the product master.
        """
        if not vendor_id or not items:
            raise ValidationException("vendor_id and items are required")

        try:
            await self.masters.get_vendor(vendor_id)
            if warehouse_id:
                await self.masters.get_warehouse(warehouse_id)

            products = await self.stock.get_products_map(item.product_id for item in items)
            lines = price_lines(items, products)
            totals = compute_totals(lines)

            po = PurchaseOrder(
                po_number=await next_document_number(self.db, PurchaseOrder.po_number, "PO"),
                vendor_id=vendor_id,
                warehouse_id=warehouse_id,
                status=status or "draft",
                notes=notes,
                **totals.as_dict(),
            )
            self.db.add(po)
            await self.db.flush()

            for line in lines:
                self.db.add(PurchaseOrderItem(
                    po_id=po.id,
                    product_id=line.product_id,
                    quantity=line.qty,
                    unit_price=line.unit_price,
                    gst_rate=line.gst_rate,
                ))

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(po)
        logger.info(f"Created purchase order {po.po_number} ({len(lines)} lines, total {po.total})")
        return po

    async def get_purchase_order(self, po_id: uuid.UUID) -> PurchaseOrder:
        po = await self.db.get(PurchaseOrder, po_id)
        if not po:
            raise NotFoundException("PurchaseOrder", po_id)
        return po

    async def list_purchase_orders(self, limit: Optional[int] = None) -> List[PurchaseOrder]:
        """Purchase orders, newest first."""
        result = await self.db.execute(
            select(PurchaseOrder)
            .order_by(desc(PurchaseOrder.created_at), desc(PurchaseOrder.po_number))
            .limit(limit or settings.list_default_limit)
        )
        return list(result.scalars().all())

    async def list_purchase_order_items(self, po_id: uuid.UUID) -> List[PurchaseOrderItem]:
        result = await self.db.execute(
            select(PurchaseOrderItem)
            .where(PurchaseOrderItem.po_id == po_id)
            .order_by(PurchaseOrderItem.created_at)
        )
        return list(result.scalars().all())

    # ===========================================
    # GOODS RECEIPTS
    # ===========================================

    async def create_grn(
        self,
        po_id: uuid.UUID,
        items: Sequence[Any],
        warehouse_id: Optional[uuid.UUID] = None,
        received_by: Optional[str] = None,
        remarks: Optional[str] = None,
    ) -> GoodsReceipt:
        """
        Receive goods against a purchase order.

        Prices fall back to the PO line and then the product master;
        GST rates the same way, then zero.

        Creates journal entry:
            Dr. Inventory (total)
                Cr. AP_Vendor (total)

        Raises:
            NotFoundException: unknown PO or product
            SerialNumberException: serial count does not match quantity
        """
        if not po_id or not items:
            raise ValidationException("po_id and items are required")

        try:
            po = await self.get_purchase_order(po_id)
            warehouse_id = warehouse_id or po.warehouse_id
            if warehouse_id:
                await self.masters.get_warehouse(warehouse_id)

            products = await self.stock.validate_serials(items)

            po_lines = {}
            for po_line in await self.list_purchase_order_items(po.id):
                po_lines.setdefault(po_line.product_id, po_line)

            lines = price_lines(items, products, po_lines)
            totals = compute_totals(lines)

            grn = GoodsReceipt(
                grn_number=await next_document_number(self.db, GoodsReceipt.grn_number, "GRN"),
                po_id=po.id,
                warehouse_id=warehouse_id,
                received_date=date.today(),
                received_by=received_by,
                remarks=remarks,
                **totals.as_dict(),
            )
            self.db.add(grn)
            await self.db.flush()

            movements = []
            for line in lines:
                self.db.add(GoodsReceiptItem(
                    grn_id=grn.id,
                    product_id=line.product_id,
                    quantity_received=line.qty,
                    unit_price=line.unit_price,
                    gst_rate=line.gst_rate,
                    serials=line.serials,
                ))
                movements.append(StockMovement(
                    product_id=line.product_id,
                    qty_delta=line.qty,
                    warehouse_id=warehouse_id or products[line.product_id].default_warehouse_id,
                    serials=line.serials,
                ))
            await self.db.flush()

            await self.stock.apply_movements(StockRefType.GRN, grn.id, movements, products)
            await self.ledger.post_goods_receipt(grn.id, grn.grn_number, totals)

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(grn)
        logger.info(f"Received {grn.grn_number} against {po.po_number} (total {grn.total})")
        return grn

    async def list_grn_items(self, grn_id: uuid.UUID) -> List[GoodsReceiptItem]:
        result = await self.db.execute(
            select(GoodsReceiptItem)
            .where(GoodsReceiptItem.grn_id == grn_id)
            .order_by(GoodsReceiptItem.created_at)
        )
        return list(result.scalars().all())
