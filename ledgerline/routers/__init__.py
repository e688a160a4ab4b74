"""
Ledgerline - API Routers Package
"""

from ledgerline.routers import (
    masters,
    procurement,
    sales,
    payments,
    inventory,
    accounting,
)

__all__ = [
    "masters",
    "procurement",
    "sales",
    "payments",
    "inventory",
    "accounting",
]
