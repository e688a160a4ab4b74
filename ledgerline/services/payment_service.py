"""
Ledgerline - Payment Service

Customer receipts and vendor payments, each posted to the ledger in the
same unit of work as the payment row:
    Payment in:   Dr. Cash_Bank     Cr. AR_Customer
    Payment out:  Dr. AP_Vendor     Cr. Cash_Bank
"""

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import List, Optional, Union

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledgerline.config import settings
from ledgerline.models.payment import Payment, PaymentType
from ledgerline.models.procurement import GoodsReceipt, PurchaseOrder
from ledgerline.services.ledger_service import LedgerService
from ledgerline.services.masters_service import MastersService
from ledgerline.services.references import resolve_document
from ledgerline.services.sales_service import SalesService
from ledgerline.services.totals import quantize_money, to_decimal
from ledgerline.utils.error_handling import (
    InvalidAmountException,
    NotFoundException,
    ValidationException,
)

logger = logging.getLogger(__name__)


def _method(mode: Optional[str]) -> str:
    return (mode or "").strip() or settings.default_payment_method


def _amount(amount) -> Decimal:
    value = quantize_money(to_decimal(amount))
    if value <= 0:
        raise InvalidAmountException(amount)
    return value


class PaymentService:
    """Service for payments in and out."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.masters = MastersService(db)
        self.ledger = LedgerService(db)

    async def record_payment_in(
        self,
        invoice_id: Union[str, uuid.UUID],
        amount: Decimal,
        customer_id: Optional[uuid.UUID] = None,
        mode: Optional[str] = None,
        currency: Optional[str] = None,
        payment_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> Payment:
        """
        Record a receipt against an invoice.

        invoice_id may be a UUID or an invoice number. The customer falls
        back to the invoice's customer.

        Raises:
            NotFoundException: unknown invoice
            ValidationException: no customer could be determined
        """
        if not invoice_id:
            raise ValidationException("invoice_id is required", field="invoice_id")
        amount = _amount(amount)

        try:
            invoice = await SalesService(self.db).resolve_invoice(invoice_id)

            customer_id = customer_id or invoice.customer_id
            if not customer_id:
                raise ValidationException(
                    "customer_id is required (and could not be inferred from invoice)",
                    field="customer_id",
                )
            await self.masters.get_customer(customer_id)

            payment = Payment(
                type=PaymentType.IN,
                payment_direction="inward",
                reference_type="invoice",
                reference_id=invoice.id,
                customer_id=customer_id,
                amount=amount,
                method=_method(mode),
                currency=(currency or settings.default_currency).upper(),
                payment_date=payment_date or date.today(),
                notes=notes or "",
            )
            self.db.add(payment)
            await self.db.flush()

            await self.ledger.post_payment_in(payment.id, amount)

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(payment)
        logger.info(f"Recorded payment in {payment.id}: {amount} against {invoice.invoice_number}")
        return payment

    async def record_payment_out(
        self,
        vendor_id: uuid.UUID,
        amount: Decimal,
        po_id: Optional[Union[str, uuid.UUID]] = None,
        grn_id: Optional[uuid.UUID] = None,
        mode: Optional[str] = None,
        currency: Optional[str] = None,
        payment_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> Payment:
        """
        Record a payment to a vendor.

        The payment references the GRN if given, else the PO (UUID or PO
        number), else the vendor itself.

        Raises:
            NotFoundException: unknown vendor, PO or GRN
            ValidationException: the PO or GRN belongs to another vendor,
                or the GRN was not received against the given PO
        """
        if not vendor_id:
            raise ValidationException("vendor_id is required", field="vendor_id")
        amount = _amount(amount)

        try:
            await self.masters.get_vendor(vendor_id)

            po = None
            if po_id:
                po = await resolve_document(self.db, PurchaseOrder, PurchaseOrder.po_number, po_id)
                if not po:
                    raise NotFoundException("PurchaseOrder", message="Invalid po_id/po_number")
                if po.vendor_id != vendor_id:
                    raise ValidationException(
                        "Purchase order belongs to a different vendor",
                        field="po_id",
                        details={"po_number": po.po_number},
                    )

            if grn_id:
                grn = await self.db.get(GoodsReceipt, grn_id)
                if not grn:
                    raise NotFoundException("GoodsReceipt", grn_id)
                if po and grn.po_id != po.id:
                    raise ValidationException(
                        "GRN was not received against this purchase order",
                        field="grn_id",
                        details={"grn_number": grn.grn_number},
                    )
                grn_po = po or await self.db.get(PurchaseOrder, grn.po_id)
                if grn_po.vendor_id != vendor_id:
                    raise ValidationException(
                        "GRN belongs to a different vendor",
                        field="grn_id",
                        details={"grn_number": grn.grn_number},
                    )

            payment = Payment(
                type=PaymentType.OUT,
                payment_direction="outward",
                reference_type="purchase",
                reference_id=grn_id or (po.id if po else None) or vendor_id,
                vendor_id=vendor_id,
                amount=amount,
                method=_method(mode),
                currency=(currency or settings.default_currency).upper(),
                payment_date=payment_date or date.today(),
                notes=notes or "",
            )
            self.db.add(payment)
            await self.db.flush()

            await self.ledger.post_payment_out(payment.id, amount)

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(payment)
        logger.info(f"Recorded payment out {payment.id}: {amount} to vendor {vendor_id}")
        return payment

    async def list_payments(
        self,
        payment_type: Optional[PaymentType] = None,
        limit: Optional[int] = None,
    ) -> List[Payment]:
        """Payments, newest first."""
        query = select(Payment)
        if payment_type:
            query = query.where(Payment.type == payment_type)

        result = await self.db.execute(
            query.order_by(desc(Payment.created_at))
            .limit(limit or settings.payments_list_default_limit)
        )
        return list(result.scalars().all())
