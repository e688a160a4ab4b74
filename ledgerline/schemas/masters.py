"""
Ledgerline - Master Data Schemas

Pydantic schemas for products, vendors, customers, tax slabs and warehouses.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional
from uuid import UUID

from pydantic import AfterValidator, AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _strip_required(value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError("name is required")
    return value


RequiredName = Annotated[str, AfterValidator(_strip_required)]


# ===========================================
# PRODUCT SCHEMAS
# ===========================================

class ProductCreate(BaseModel):
    """Schema for creating a product."""
    name: RequiredName = Field(..., max_length=255)
    sku: Optional[str] = Field(None, max_length=100)
    category: Optional[str] = Field(None, max_length=100)
    unit: Optional[str] = Field(None, max_length=20)
    gst_percent: Optional[Decimal] = Field(
        None, ge=0, le=100, validation_alias=AliasChoices("gst_percent", "gst_rate")
    )
    unit_price: Optional[Decimal] = Field(None, ge=0)
    has_serial: bool = Field(
        False, validation_alias=AliasChoices("has_serial", "is_serialized")
    )
    default_warehouse_id: Optional[UUID] = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("sku")
    @classmethod
    def blank_sku_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None


class ProductResponse(BaseModel):
    """Response schema for a product."""
    id: UUID
    name: str
    sku: Optional[str]
    category: Optional[str]
    unit: Optional[str]
    gst_percent: Optional[float]
    unit_price: Optional[float]
    has_serial: bool
    default_warehouse_id: Optional[UUID]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductCreatedResponse(BaseModel):
    message: str
    id: UUID
    data: ProductResponse


# ===========================================
# VENDOR / CUSTOMER SCHEMAS
# ===========================================

class PartyCreate(BaseModel):
    """Schema for creating a vendor or a customer."""
    name: RequiredName = Field(..., max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    gstin: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    contact_number: Optional[str] = Field(None, max_length=30)
    contact_person_name: Optional[str] = Field(None, max_length=255)


class PartyResponse(BaseModel):
    """Response schema for a vendor or a customer."""
    id: UUID
    name: str
    email: Optional[str]
    gstin: Optional[str]
    address: Optional[str]
    contact_number: Optional[str]
    contact_person_name: Optional[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PartyCreatedResponse(BaseModel):
    message: str
    id: UUID
    data: PartyResponse


# ===========================================
# TAX SLAB SCHEMAS
# ===========================================

class TaxSlabCreate(BaseModel):
    name: RequiredName = Field(..., max_length=100)
    rate: Decimal = Field(..., ge=0, le=100)
    description: Optional[str] = None


class TaxSlabResponse(BaseModel):
    id: UUID
    name: str
    rate: float
    description: Optional[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ===========================================
# WAREHOUSE SCHEMAS
# ===========================================

class WarehouseCreate(BaseModel):
    name: RequiredName = Field(..., max_length=255)
    code: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None


class WarehouseResponse(BaseModel):
    id: UUID
    name: str
    code: Optional[str]
    address: Optional[str]
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WarehouseCreatedResponse(BaseModel):
    message: str
    id: UUID
    data: WarehouseResponse
