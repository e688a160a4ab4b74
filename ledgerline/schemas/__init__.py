"""
Ledgerline - Schemas Package

Pydantic schemas for request/response validation.
"""

from ledgerline.schemas.common import (
    LineItemCreate,
    DeliveryLineItemCreate,
    LineItemResponse,
    CreatedResponse,
    MessageResponse,
)
from ledgerline.schemas.masters import (
    ProductCreate,
    ProductResponse,
    ProductCreatedResponse,
    PartyCreate,
    PartyResponse,
    PartyCreatedResponse,
    TaxSlabCreate,
    TaxSlabResponse,
    WarehouseCreate,
    WarehouseResponse,
    WarehouseCreatedResponse,
)
from ledgerline.schemas.procurement import (
    PurchaseOrderCreate,
    PurchaseOrderResponse,
    PurchaseOrderItemResponse,
    GoodsReceiptCreate,
    GoodsReceiptResponse,
)
from ledgerline.schemas.sales import (
    QuotationCreate,
    QuotationResponse,
    SalesOrderCreate,
    SalesOrderResponse,
    DeliveryCreate,
    InvoiceCreate,
    InvoiceResponse,
    InvoiceDetailResponse,
)
from ledgerline.schemas.payments import (
    PaymentInCreate,
    PaymentOutCreate,
    PaymentResponse,
)
from ledgerline.schemas.accounting import (
    LedgerEntryResponse,
    JournalResponse,
    TrialBalanceRowResponse,
    TrialBalanceResponse,
    StockLedgerEntryResponse,
    StockBalanceResponse,
)
