"""
Ledgerline - SQLAlchemy Models Package

This package contains all database models for the application.
"""

from ledgerline.models.base import BaseModel, TimestampMixin
from ledgerline.models.masters import Warehouse, Product, Vendor, Customer, TaxSlab
from ledgerline.models.procurement import (
    DocumentTotalsMixin,
    PurchaseOrder,
    PurchaseOrderItem,
    GoodsReceipt,
    GoodsReceiptItem,
)
from ledgerline.models.sales import (
    SalesQuotation,
    SalesQuotationItem,
    SalesOrder,
    SalesOrderItem,
    DeliveryChallan,
    DeliveryChallanItem,
    SalesInvoice,
    SalesInvoiceItem,
)
from ledgerline.models.payment import Payment, PaymentType
from ledgerline.models.ledger import JournalEntry, LedgerEntry, LedgerAccount, LedgerRefType
from ledgerline.models.stock import (
    StockLedgerEntry,
    StockBalance,
    ProductSerial,
    StockRefType,
    SerialStatus,
)

__all__ = [
    "BaseModel",
    "TimestampMixin",
    "DocumentTotalsMixin",
    # Masters
    "Warehouse",
    "Product",
    "Vendor",
    "Customer",
    "TaxSlab",
    # Procurement
    "PurchaseOrder",
    "PurchaseOrderItem",
    "GoodsReceipt",
    "GoodsReceiptItem",
    # Sales
    "SalesQuotation",
    "SalesQuotationItem",
    "SalesOrder",
    "SalesOrderItem",
    "DeliveryChallan",
    "DeliveryChallanItem",
    "SalesInvoice",
    "SalesInvoiceItem",
    # Payments
    "Payment",
    "PaymentType",
    # Ledger
    "JournalEntry",
    "LedgerEntry",
    "LedgerAccount",
    "LedgerRefType",
    # Stock
    "StockLedgerEntry",
    "StockBalance",
    "ProductSerial",
    "StockRefType",
    "SerialStatus",
]
