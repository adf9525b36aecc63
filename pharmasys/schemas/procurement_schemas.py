from pydantic import BaseModel, field_validator
from typing import List, Optional
from datetime import date as date_type, datetime

from .item_schemas import NamedRef

PAYMENT_STATUSES = ("unpaid", "partial", "paid")
PAYMENT_METHODS = ("cash", "transfer", "credit")

class PurchaseItemCreate(BaseModel):
    item_id: int
    quantity: float
    unit: Optional[str] = None  # Defaults to the item's base unit
    price: float = 0.0
    discount: float = 0.0  # Percent
    subtotal: Optional[float] = None  # Computed when omitted
    batch_no: Optional[str] = None
    expiry_date: Optional[date_type] = None

    @field_validator("quantity")
    @classmethod
    def quantity_positive(cls, v):
        if v <= 0:
            raise ValueError("Quantity must be greater than zero")
        return v

    @field_validator("discount")
    @classmethod
    def discount_in_range(cls, v):
        if v < 0 or v > 100:
            raise ValueError("Discount must be between 0 and 100")
        return v

class PurchaseItemResponse(BaseModel):
    id: int
    item_id: int
    item: Optional[NamedRef] = None
    quantity: float
    unit: Optional[str] = None
    price: float
    discount: float = 0.0
    subtotal: float
    batch_no: Optional[str] = None
    expiry_date: Optional[date_type] = None

    class Config:
        from_attributes = True

class PurchaseBase(BaseModel):
    invoice_number: str
    supplier_id: Optional[int] = None
    date: Optional[datetime] = None
    due_date: Optional[date_type] = None
    payment_status: str = "unpaid"
    payment_method: str = "cash"
    notes: Optional[str] = None

    @field_validator("invoice_number")
    @classmethod
    def invoice_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Invoice number is required")
        return v.strip()

    @field_validator("payment_status")
    @classmethod
    def known_status(cls, v):
        if v not in PAYMENT_STATUSES:
            raise ValueError(f"Payment status must be one of {', '.join(PAYMENT_STATUSES)}")
        return v

    @field_validator("payment_method")
    @classmethod
    def known_method(cls, v):
        if v not in PAYMENT_METHODS:
            raise ValueError(f"Payment method must be one of {', '.join(PAYMENT_METHODS)}")
        return v

class PurchaseCreate(PurchaseBase):
    items: List[PurchaseItemCreate]

    @field_validator("items")
    @classmethod
    def has_items(cls, v):
        if not v:
            raise ValueError("A purchase needs at least one item")
        return v

class PurchasePaymentUpdate(BaseModel):
    payment_status: Optional[str] = None
    payment_method: Optional[str] = None

    @field_validator("payment_status")
    @classmethod
    def known_status(cls, v):
        if v is not None and v not in PAYMENT_STATUSES:
            raise ValueError(f"Payment status must be one of {', '.join(PAYMENT_STATUSES)}")
        return v

    @field_validator("payment_method")
    @classmethod
    def known_method(cls, v):
        if v is not None and v not in PAYMENT_METHODS:
            raise ValueError(f"Payment method must be one of {', '.join(PAYMENT_METHODS)}")
        return v

class PurchaseListResponse(PurchaseBase):
    id: int
    date: Optional[datetime] = None
    total: float
    supplier: Optional[NamedRef] = None

    class Config:
        from_attributes = True

class PurchaseResponse(PurchaseListResponse):
    items: List[PurchaseItemResponse] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
