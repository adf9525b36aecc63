# Models package - exports all models
from ..database import Base
from .inventory_models import ItemCategory, ItemType, ItemUnit
from .pharmacy_models import Item, Supplier
from .procurement_models import Purchase, PurchaseItem
from .sales_models import Patient, Doctor, Sale, SaleItem
from .user_models import User

__all__ = [
    "Base",  # Re-exported from database
    "ItemCategory",
    "ItemType",
    "ItemUnit",
    "Item",
    "Supplier",
    "Purchase",
    "PurchaseItem",
    "Patient",
    "Doctor",
    "Sale",
    "SaleItem",
    "User",
]
