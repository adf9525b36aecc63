from pydantic import BaseModel
from typing import Optional

class DashboardSummary(BaseModel):
    total_items: int
    low_stock_items: int
    total_patients: int
    total_doctors: int
    total_suppliers: int
    today_sales_total: float
    today_sales_count: int
    today_purchases_total: float
    unpaid_purchases_total: float

class TopSellingItem(BaseModel):
    name: str
    total_quantity: int

class LowStockItem(BaseModel):
    id: int
    code: Optional[str] = None
    name: str
    stock: float
    min_stock: int
    base_unit: Optional[str] = None

    class Config:
        from_attributes = True
