"""
Ledgerline - Sales Service Tests

Tests for quotations, sales orders, deliveries and invoices.
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from ledgerline.models import JournalEntry, SalesInvoice, SalesInvoiceItem, SerialStatus
from ledgerline.schemas import DeliveryLineItemCreate, LineItemCreate
from ledgerline.services.ledger_service import LedgerService
from ledgerline.services.masters_service import MastersService
from ledgerline.services.procurement_service import ProcurementService
from ledgerline.services.sales_service import SalesService
from ledgerline.services.stock_service import StockService
from ledgerline.utils.error_handling import (
    CustomerNotFoundException,
    InsufficientStockException,
    NotFoundException,
    SerialNumberException,
    UnbalancedEntryException,
    ValidationException,
)


async def _count(db_session, model) -> int:
    result = await db_session.execute(select(func.count()).select_from(model))
    return result.scalar()


async def _receive(db_session, vendor_id, product_id, qty, serials=None, warehouse_id=None):
    procurement = ProcurementService(db_session)
    po = await procurement.create_purchase_order(
        vendor_id,
        [LineItemCreate(product_id=product_id, qty=qty)],
        warehouse_id=warehouse_id,
    )
    return await procurement.create_grn(
        po.id,
        [LineItemCreate(product_id=product_id, qty=qty, serials=serials or [])],
    )


class TestQuotationsAndOrders:
    """Test cases for quotations and sales orders."""

    @pytest.mark.asyncio
    async def test_create_quotation(self, db_session, test_customer, test_product):
        service = SalesService(db_session)

        quotation = await service.create_quotation(
            test_customer.id,
            [LineItemCreate(product_id=test_product.id, qty=3)],
        )

        assert quotation.quote_number.startswith("Q-")
        assert quotation.subtotal == Decimal("300.00")
        assert quotation.total == Decimal("354.00")
        assert len(await service.list_quotations()) == 1

    @pytest.mark.asyncio
    async def test_create_sales_order_from_quotation(self, db_session, test_customer, test_product):
        service = SalesService(db_session)
        items = [LineItemCreate(product_id=test_product.id, qty=1, unit_price=Decimal("95"))]

        quotation = await service.create_quotation(test_customer.id, items)
        order = await service.create_sales_order(test_customer.id, items, quotation_id=quotation.id)

        assert order.so_number.startswith("SO-")
        assert order.quotation_id == quotation.id
        assert order.subtotal == Decimal("95.00")

    @pytest.mark.asyncio
    async def test_sales_order_unknown_customer(self, db_session, test_product):
        service = SalesService(db_session)
        product_id = test_product.id

        with pytest.raises(CustomerNotFoundException):
            await service.create_sales_order(uuid4(), [LineItemCreate(product_id=product_id, qty=1)])

    @pytest.mark.asyncio
    async def test_resolve_sales_order_by_number_or_id(self, db_session, test_customer, test_product):
        service = SalesService(db_session)

        order = await service.create_sales_order(
            test_customer.id,
            [LineItemCreate(product_id=test_product.id, qty=1)],
        )

        assert (await service.resolve_sales_order(order.so_number)).id == order.id
        assert (await service.resolve_sales_order(str(order.id))).id == order.id

        with pytest.raises(NotFoundException) as exc_info:
            await service.resolve_sales_order("SO-1999-99999")
        assert exc_info.value.message == "Invalid sales_order_id/so_number"


class TestDeliveries:
    """Test cases for delivery challans."""

    @pytest.mark.asyncio
    async def test_delivery_reduces_stock(
        self, db_session, test_vendor, test_customer, test_product, test_warehouse
    ):
        product_id, warehouse_id = test_product.id, test_warehouse.id
        await _receive(db_session, test_vendor.id, product_id, 10, warehouse_id=warehouse_id)

        service = SalesService(db_session)
        order = await service.create_sales_order(
            test_customer.id,
            [LineItemCreate(product_id=product_id, qty=3)],
        )
        delivery = await service.create_delivery(
            order.so_number,
            [DeliveryLineItemCreate(product_id=product_id, qty=3)],
            warehouse_id=warehouse_id,
        )

        assert delivery.dc_number.startswith("DC-")
        assert delivery.sales_order_id == order.id
        assert await StockService(db_session).get_on_hand(product_id, warehouse_id) == 7

        [item] = await service.list_delivery_items(delivery.id)
        assert item.qty == 3
        assert item.warehouse_id == warehouse_id

        # Deliveries are not posted to the ledger
        assert await LedgerService(db_session).get_journal("DELIVERY", delivery.id) is None

    @pytest.mark.asyncio
    async def test_delivery_falls_back_to_product_default_warehouse(
        self, db_session, test_vendor, test_customer, test_warehouse
    ):
        warehouse_id = test_warehouse.id
        product = await MastersService(db_session).create_product(
            "Patch Panel", sku="PP-48", unit_price=Decimal("400"), default_warehouse_id=warehouse_id
        )
        product_id = product.id
        await _receive(db_session, test_vendor.id, product_id, 5)

        service = SalesService(db_session)
        order = await service.create_sales_order(
            test_customer.id,
            [LineItemCreate(product_id=product_id, qty=2)],
        )
        delivery = await service.create_delivery(
            order.so_number,
            [DeliveryLineItemCreate(product_id=product_id, qty=2)],
        )

        assert delivery.warehouse_id is None
        [item] = await service.list_delivery_items(delivery.id)
        assert item.warehouse_id == warehouse_id
        assert await StockService(db_session).get_on_hand(product_id, warehouse_id) == 3

    @pytest.mark.asyncio
    async def test_delivery_marks_serials_delivered(
        self, db_session, test_vendor, test_customer, test_serialized_product
    ):
        product_id = test_serialized_product.id
        await _receive(db_session, test_vendor.id, product_id, 2, serials=["NS-1", "NS-2"])

        service = SalesService(db_session)
        order = await service.create_sales_order(
            test_customer.id,
            [LineItemCreate(product_id=product_id, qty=1)],
        )
        delivery = await service.create_delivery(
            str(order.id),
            [DeliveryLineItemCreate(product_id=product_id, qty=1, serials=["NS-2"])],
        )

        stock = StockService(db_session)
        serial = await stock.get_serial(product_id, "NS-2")
        assert serial.status == SerialStatus.DELIVERED
        assert serial.delivered_ref_id == delivery.id
        assert (await stock.get_serial(product_id, "NS-1")).status == SerialStatus.IN_STOCK
        assert await stock.get_on_hand(product_id) == 1

    @pytest.mark.asyncio
    async def test_delivery_requires_serials(
        self, db_session, test_vendor, test_customer, test_serialized_product
    ):
        product_id = test_serialized_product.id
        await _receive(db_session, test_vendor.id, product_id, 1, serials=["NS-1"])

        service = SalesService(db_session)
        order = await service.create_sales_order(test_customer.id, [LineItemCreate(product_id=product_id, qty=1)])
        so_number = order.so_number

        with pytest.raises(SerialNumberException):
            await service.create_delivery(so_number, [DeliveryLineItemCreate(product_id=product_id, qty=1)])

        assert await StockService(db_session).get_on_hand(product_id) == 1

    @pytest.mark.asyncio
    async def test_delivery_insufficient_stock(self, db_session, test_vendor, test_customer, test_product):
        product_id = test_product.id
        await _receive(db_session, test_vendor.id, product_id, 2)

        service = SalesService(db_session)
        order = await service.create_sales_order(test_customer.id, [LineItemCreate(product_id=product_id, qty=5)])
        so_number = order.so_number

        with pytest.raises(InsufficientStockException):
            await service.create_delivery(so_number, [DeliveryLineItemCreate(product_id=product_id, qty=5)])

        assert await StockService(db_session).get_on_hand(product_id) == 2

    @pytest.mark.asyncio
    async def test_delivery_rejects_foreign_order_line(
        self, db_session, test_vendor, test_customer, test_product
    ):
        product_id = test_product.id
        await _receive(db_session, test_vendor.id, product_id, 5)

        service = SalesService(db_session)
        order = await service.create_sales_order(test_customer.id, [LineItemCreate(product_id=product_id, qty=1)])
        so_number = order.so_number

        with pytest.raises(ValidationException):
            await service.create_delivery(
                so_number,
                [DeliveryLineItemCreate(product_id=product_id, qty=1, sales_order_item_id=uuid4())],
            )

    @pytest.mark.asyncio
    async def test_delivery_unknown_order(self, db_session, test_product):
        service = SalesService(db_session)
        product_id = test_product.id

        with pytest.raises(NotFoundException):
            await service.create_delivery("SO-1999-00001", [DeliveryLineItemCreate(product_id=product_id, qty=1)])


class TestInvoices:
    """Test cases for invoices and their postings."""

    @pytest.mark.asyncio
    async def test_invoice_posts_receivable_revenue_and_gst(self, db_session, test_customer, test_product):
        service = SalesService(db_session)

        invoice = await service.create_invoice(
            test_customer.id,
            [LineItemCreate(product_id=test_product.id, qty=2, unit_price=Decimal("100"), gst_rate=Decimal("18"))],
        )

        assert invoice.invoice_number.startswith("INV-")
        assert invoice.status == "issued"
        assert invoice.total == Decimal("236.00")

        journal, lines = await LedgerService(db_session).get_journal("INVOICE", invoice.id)
        assert journal.total_debit == Decimal("236.00")
        assert [(l.ledger, l.debit, l.credit) for l in lines] == [
            ("AR_Customer", Decimal("236.00"), Decimal("0.00")),
            ("Revenue", Decimal("0.00"), Decimal("200.00")),
            ("GST_Payable", Decimal("0.00"), Decimal("36.00")),
        ]

    @pytest.mark.asyncio
    async def test_invoice_gst_defaults_from_product(self, db_session, test_customer, test_product):
        service = SalesService(db_session)

        invoice = await service.create_invoice(
            test_customer.id,
            [LineItemCreate(product_id=test_product.id, qty=1, unit_price=Decimal("50"))],
        )

        assert invoice.gst_total == Decimal("9.00")

    @pytest.mark.asyncio
    async def test_invoice_totals_match_stored_lines(self, db_session, test_customer, test_product):
        service = SalesService(db_session)

        invoice = await service.create_invoice(
            test_customer.id,
            [LineItemCreate(
                product_id=test_product.id, qty=1000, unit_price=Decimal("100"), gst_rate=Decimal("12.345")
            )],
        )
        fetched, items, _, _ = await service.get_invoice(invoice.id)

        [item] = items
        assert item.gst_rate == Decimal("12.35")
        line_gst = sum(i.quantity * i.unit_price * i.gst_rate / 100 for i in items)
        assert fetched.gst_total == line_gst.quantize(Decimal("0.01"))
        assert fetched.gst_total == Decimal("12350.00")

        _, lines = await LedgerService(db_session).get_journal("INVOICE", invoice.id)
        gst_line = next(l for l in lines if l.ledger == "GST_Payable")
        assert gst_line.credit == Decimal("12350.00")

    @pytest.mark.asyncio
    async def test_failed_posting_leaves_no_invoice(
        self, db_session, test_customer, test_product, monkeypatch
    ):
        async def failing_post(self, *args, **kwargs):
            raise UnbalancedEntryException(1, 0)

        monkeypatch.setattr(LedgerService, "post_entries", failing_post)
        customer_id, product_id = test_customer.id, test_product.id

        with pytest.raises(UnbalancedEntryException):
            await SalesService(db_session).create_invoice(
                customer_id,
                [LineItemCreate(product_id=product_id, qty=2)],
            )

        assert await _count(db_session, SalesInvoice) == 0
        assert await _count(db_session, SalesInvoiceItem) == 0
        assert await _count(db_session, JournalEntry) == 0

    @pytest.mark.asyncio
    async def test_get_invoice_with_outstanding(self, db_session, test_customer, test_product):
        service = SalesService(db_session)

        invoice = await service.create_invoice(
            test_customer.id,
            [LineItemCreate(product_id=test_product.id, qty=2)],
        )
        fetched, items, amount_paid, outstanding = await service.get_invoice(invoice.invoice_number)

        assert fetched.id == invoice.id
        assert len(items) == 1
        assert amount_paid == Decimal("0.00")
        assert outstanding == Decimal("236.00")

    @pytest.mark.asyncio
    async def test_get_invoice_unknown(self, db_session):
        with pytest.raises(NotFoundException) as exc_info:
            await SalesService(db_session).get_invoice(str(uuid4()))

        assert exc_info.value.message == "Invalid invoice_id/invoice_number"
