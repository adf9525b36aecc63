from pydantic import BaseModel, field_validator
from typing import List, Optional
from datetime import datetime

from .item_schemas import NamedRef

class SaleItemCreate(BaseModel):
    item_id: int
    quantity: int
    unit: Optional[str] = None
    price: Optional[float] = None  # Defaults to the item's sell price for `unit`

    @field_validator("quantity")
    @classmethod
    def quantity_positive(cls, v):
        if v <= 0:
            raise ValueError("Quantity must be greater than zero")
        return v

class SaleCreate(BaseModel):
    patient_id: Optional[int] = None
    doctor_id: Optional[int] = None
    payment_method: str = "cash"
    items: List[SaleItemCreate]

    @field_validator("items")
    @classmethod
    def has_items(cls, v):
        if not v:
            raise ValueError("A sale needs at least one item")
        return v

class SaleItemResponse(BaseModel):
    id: int
    item_id: int
    item: Optional[NamedRef] = None
    quantity: int
    unit: Optional[str] = None
    price: float
    subtotal: float

    class Config:
        from_attributes = True

class SaleResponse(BaseModel):
    id: int
    invoice_number: str
    patient_id: Optional[int] = None
    doctor_id: Optional[int] = None
    patient: Optional[NamedRef] = None
    doctor: Optional[NamedRef] = None
    date: datetime
    total: float
    payment_method: str
    items: List[SaleItemResponse] = []

    class Config:
        from_attributes = True
