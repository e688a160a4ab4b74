"""
Ledgerline - Masters Router

API endpoints for products, vendors, customers, tax slabs and warehouses.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ledgerline.database import get_async_session
from ledgerline.services.masters_service import MastersService
from ledgerline.schemas.common import CreatedResponse
from ledgerline.schemas.masters import (
    PartyCreate,
    PartyCreatedResponse,
    PartyResponse,
    ProductCreate,
    ProductCreatedResponse,
    ProductResponse,
    TaxSlabCreate,
    TaxSlabResponse,
    WarehouseCreate,
    WarehouseCreatedResponse,
    WarehouseResponse,
)


router = APIRouter()


# ===========================================
# PRODUCT ENDPOINTS
# ===========================================

@router.get(
    "/products",
    response_model=List[ProductResponse],
    summary="List products",
)
async def list_products(
    db: AsyncSession = Depends(get_async_session),
):
    service = MastersService(db)
    products = await service.list_products()
    return [ProductResponse.model_validate(p) for p in products]


@router.post(
    "/products",
    response_model=ProductCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create product",
)
async def create_product(
    request: ProductCreate,
    db: AsyncSession = Depends(get_async_session),
):
    """
    Create a product.

    `gst_rate` is accepted for `gst_percent` and `is_serialized` for
    `has_serial`. A duplicate SKU returns 409.
    """
    service = MastersService(db)
    product = await service.create_product(**request.model_dump())
    return ProductCreatedResponse(
        message="Product created",
        id=product.id,
        data=ProductResponse.model_validate(product),
    )


# ===========================================
# VENDOR & CUSTOMER ENDPOINTS
# ===========================================

@router.get("/vendors", response_model=List[PartyResponse], summary="List vendors")
async def list_vendors(db: AsyncSession = Depends(get_async_session)):
    vendors = await MastersService(db).list_vendors()
    return [PartyResponse.model_validate(v) for v in vendors]


@router.post(
    "/vendors",
    response_model=PartyCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create vendor",
)
async def create_vendor(
    request: PartyCreate,
    db: AsyncSession = Depends(get_async_session),
):
    vendor = await MastersService(db).create_vendor(**request.model_dump())
    return PartyCreatedResponse(
        message="Vendor created",
        id=vendor.id,
        data=PartyResponse.model_validate(vendor),
    )


@router.get("/customers", response_model=List[PartyResponse], summary="List customers")
async def list_customers(db: AsyncSession = Depends(get_async_session)):
    customers = await MastersService(db).list_customers()
    return [PartyResponse.model_validate(c) for c in customers]


@router.post(
    "/customers",
    response_model=PartyCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create customer",
)
async def create_customer(
    request: PartyCreate,
    db: AsyncSession = Depends(get_async_session),
):
    customer = await MastersService(db).create_customer(**request.model_dump())
    return PartyCreatedResponse(
        message="Customer created",
        id=customer.id,
        data=PartyResponse.model_validate(customer),
    )


# ===========================================
# TAX SLAB ENDPOINTS
# ===========================================

@router.get("/tax", response_model=List[TaxSlabResponse], summary="List tax slabs")
async def list_tax_slabs(db: AsyncSession = Depends(get_async_session)):
    slabs = await MastersService(db).list_tax_slabs()
    return [TaxSlabResponse.model_validate(s) for s in slabs]


@router.post(
    "/tax",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create tax slab",
)
async def create_tax_slab(
    request: TaxSlabCreate,
    db: AsyncSession = Depends(get_async_session),
):
    slab = await MastersService(db).create_tax_slab(**request.model_dump())
    return CreatedResponse(message="Tax slab created", id=slab.id)


# ===========================================
# WAREHOUSE ENDPOINTS
# ===========================================

@router.get("/warehouses", response_model=List[WarehouseResponse], summary="List warehouses")
async def list_warehouses(db: AsyncSession = Depends(get_async_session)):
    warehouses = await MastersService(db).list_warehouses()
    return [WarehouseResponse.model_validate(w) for w in warehouses]


@router.post(
    "/warehouses",
    response_model=WarehouseCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create warehouse",
)
async def create_warehouse(
    request: WarehouseCreate,
    db: AsyncSession = Depends(get_async_session),
):
    warehouse = await MastersService(db).create_warehouse(**request.model_dump())
    return WarehouseCreatedResponse(
        message="Warehouse created",
        id=warehouse.id,
        data=WarehouseResponse.model_validate(warehouse),
    )
