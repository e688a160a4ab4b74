"""
Ledgerline - Services Package

Business logic for the sales & accounts cycle.
"""

from ledgerline.services.ledger_service import LedgerService
from ledgerline.services.stock_service import StockService
from ledgerline.services.masters_service import MastersService
from ledgerline.services.procurement_service import ProcurementService
from ledgerline.services.sales_service import SalesService
from ledgerline.services.payment_service import PaymentService

__all__ = [
    "LedgerService",
    "StockService",
    "MastersService",
    "ProcurementService",
    "SalesService",
    "PaymentService",
]
