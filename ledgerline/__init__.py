"""
Ledgerline Sales & Accounts

Procurement, sales, payments, stock ledger and double-entry bookkeeping.
"""

__version__ = "0.1.0"
