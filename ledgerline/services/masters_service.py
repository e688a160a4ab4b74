"""
Ledgerline - Master Data Service

Products, vendors, customers, tax slabs and warehouses.
"""

import logging
import uuid
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledgerline.models.masters import Customer, Product, TaxSlab, Vendor, Warehouse
from ledgerline.utils.error_handling import (
    CustomerNotFoundException,
    DuplicateEntryException,
    NotFoundException,
    VendorNotFoundException,
)

logger = logging.getLogger(__name__)


class MastersService:
    """Service for master data."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _save(self, instance):
        try:
            self.db.add(instance)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await self.db.refresh(instance)
        return instance

    # ===========================================
    # PRODUCTS
    # ===========================================

    async def create_product(
        self,
        name: str,
        sku: Optional[str] = None,
        category: Optional[str] = None,
        unit: Optional[str] = None,
        gst_percent: Optional[Decimal] = None,
        unit_price: Optional[Decimal] = None,
        has_serial: bool = False,
        default_warehouse_id: Optional[uuid.UUID] = None,
    ) -> Product:
        """
        Create a product.

        Raises:
            DuplicateEntryException: another product already has this SKU
        """
        if sku and await self.get_product_by_sku(sku):
            raise DuplicateEntryException("Product", "sku", sku, message="SKU already exists")

        if default_warehouse_id:
            await self.get_warehouse(default_warehouse_id)

        product = await self._save(Product(
            name=name,
            sku=sku,
            category=category,
            unit=unit,
            gst_percent=gst_percent,
            unit_price=unit_price,
            has_serial=bool(has_serial),
            default_warehouse_id=default_warehouse_id,
        ))

        logger.info(f"Created product {product.id} (sku={sku}, serialized={product.has_serial})")
        return product

    async def get_product_by_sku(self, sku: str) -> Optional[Product]:
        result = await self.db.execute(select(Product).where(Product.sku == sku))
        return result.scalar_one_or_none()

    async def list_products(self) -> List[Product]:
        result = await self.db.execute(select(Product).order_by(desc(Product.created_at)))
        return list(result.scalars().all())

    # ===========================================
    # VENDORS & CUSTOMERS
    # ===========================================

    async def create_vendor(self, name: str, **contact) -> Vendor:
        """Create a vendor. Contact fields: email, gstin, address, contact_number, contact_person_name."""
        vendor = await self._save(Vendor(name=name, **contact))
        logger.info(f"Created vendor {vendor.id}")
        return vendor

    async def get_vendor(self, vendor_id: uuid.UUID) -> Vendor:
        vendor = await self.db.get(Vendor, vendor_id)
        if not vendor:
            raise VendorNotFoundException(vendor_id)
        return vendor

    async def list_vendors(self) -> List[Vendor]:
        result = await self.db.execute(select(Vendor).order_by(desc(Vendor.created_at)))
        return list(result.scalars().all())

    async def create_customer(self, name: str, **contact) -> Customer:
        """Create a customer. Takes the same contact fields as vendors."""
        customer = await self._save(Customer(name=name, **contact))
        logger.info(f"Created customer {customer.id}")
        return customer

    async def get_customer(self, customer_id: uuid.UUID) -> Customer:
        customer = await self.db.get(Customer, customer_id)
        if not customer:
            raise CustomerNotFoundException(customer_id)
        return customer

    async def list_customers(self) -> List[Customer]:
        result = await self.db.execute(select(Customer).order_by(desc(Customer.created_at)))
        return list(result.scalars().all())

    # ===========================================
    # TAX SLABS
    # ===========================================

    async def create_tax_slab(
        self,
        name: str,
        rate: Decimal,
        description: Optional[str] = None,
    ) -> TaxSlab:
        slab = await self._save(TaxSlab(name=name, rate=rate, description=description))
        logger.info(f"Created tax slab {slab.name} ({slab.rate}%)")
        return slab

    async def list_tax_slabs(self) -> List[TaxSlab]:
        result = await self.db.execute(select(TaxSlab).order_by(TaxSlab.rate, TaxSlab.name))
        return list(result.scalars().all())

    # ===========================================
    # WAREHOUSES
    # ===========================================

    async def create_warehouse(
        self,
        name: str,
        code: Optional[str] = None,
        address: Optional[str] = None,
    ) -> Warehouse:
        """
        Create a warehouse.

        Raises:
            DuplicateEntryException: the code is already taken
        """
        if code:
            result = await self.db.execute(select(Warehouse.id).where(Warehouse.code == code))
            if result.scalar_one_or_none():
                raise DuplicateEntryException("Warehouse", "code", code)

        warehouse = await self._save(Warehouse(name=name, code=code, address=address, is_active=True))
        logger.info(f"Created warehouse {warehouse.id} ({code})")
        return warehouse

    async def get_warehouse(self, warehouse_id: uuid.UUID) -> Warehouse:
        warehouse = await self.db.get(Warehouse, warehouse_id)
        if not warehouse:
            raise NotFoundException("Warehouse", warehouse_id)
        return warehouse

    async def list_warehouses(self) -> List[Warehouse]:
        result = await self.db.execute(select(Warehouse).order_by(Warehouse.name))
        return list(result.scalars().all())
