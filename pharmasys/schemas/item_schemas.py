from pydantic import BaseModel, field_validator
from typing import List, Optional
from datetime import datetime

from ..services.unit_conversion import parse_unit_conversions

class UnitConversionData(BaseModel):
    unit_name: str
    to_unit_id: Optional[int] = None
    conversion_rate: float
    base_price: float = 0.0
    sell_price: float = 0.0

class NamedRef(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True

class ItemCreate(BaseModel):
    name: str
    code: Optional[str] = None  # Generated from type/unit/category when omitted
    barcode: Optional[str] = None
    rack: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[int] = None
    type_id: Optional[int] = None
    unit_id: Optional[int] = None
    base_unit: Optional[str] = None
    base_price: float = 0.0
    sell_price: float = 0.0
    min_stock: int = 10
    is_active: bool = True
    is_medicine: bool = True
    has_expiry_date: bool = False
    unit_conversions: List[UnitConversionData] = []

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("base_price", "sell_price")
    @classmethod
    def price_not_negative(cls, v):
        if v < 0:
            raise ValueError("Price cannot be negative")
        return v

class ItemUpdate(BaseModel):
    name: Optional[str] = None
    code: Optional[str] = None
    barcode: Optional[str] = None
    rack: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[int] = None
    type_id: Optional[int] = None
    unit_id: Optional[int] = None
    base_unit: Optional[str] = None
    base_price: Optional[float] = None
    sell_price: Optional[float] = None
    min_stock: Optional[int] = None
    is_active: Optional[bool] = None
    is_medicine: Optional[bool] = None
    has_expiry_date: Optional[bool] = None
    unit_conversions: Optional[List[UnitConversionData]] = None

    @field_validator("base_price", "sell_price")
    @classmethod
    def price_not_negative(cls, v):
        if v is not None and v < 0:
            raise ValueError("Price cannot be negative")
        return v

    @field_validator("min_stock")
    @classmethod
    def min_stock_not_negative(cls, v):
        if v is not None and v < 0:
            raise ValueError("Minimum stock cannot be negative")
        return v

class ItemResponse(BaseModel):
    id: int
    code: Optional[str] = None
    name: str
    barcode: Optional[str] = None
    rack: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[int] = None
    type_id: Optional[int] = None
    unit_id: Optional[int] = None
    category: Optional[NamedRef] = None
    type: Optional[NamedRef] = None
    unit: Optional[NamedRef] = None
    base_unit: Optional[str] = None
    base_price: float = 0.0
    sell_price: float = 0.0
    stock: float = 0.0
    min_stock: Optional[int] = None
    is_active: bool = True
    is_medicine: bool = True
    has_expiry_date: bool = False
    unit_conversions: List[UnitConversionData] = []
    updated_at: Optional[datetime] = None

    @field_validator("unit_conversions", mode="before")
    @classmethod
    def parse_conversions(cls, v):
        return parse_unit_conversions(v)

    class Config:
        from_attributes = True

class ItemCodePreview(BaseModel):
    code: str

class PricingRequest(BaseModel):
    base_price: float
    sell_price: Optional[float] = None
    margin_percentage: Optional[float] = None
    unit_conversions: List[UnitConversionData] = []

class PricingResponse(BaseModel):
    base_price: float
    sell_price: float
    profit_percentage: Optional[float] = None
    unit_conversions: List[UnitConversionData]
