from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy import func
from datetime import datetime
from typing import List

from ..database import get_db
from ..models import Item, Patient, Doctor, Supplier, Purchase, Sale, SaleItem, User
from ..schemas.dashboard_schemas import DashboardSummary, TopSellingItem, LowStockItem
from ..auth import get_current_user

router = APIRouter()


def _low_stock_query(db: Session):
    return db.query(Item).filter(
        Item.is_active == True,
        func.coalesce(Item.stock, 0) <= func.coalesce(Item.min_stock, 0),
    )


@router.get("/summary", response_model=DashboardSummary)
def get_summary(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    today = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)

    sales_total, sales_count = db.query(
        func.coalesce(func.sum(Sale.total), 0), func.count(Sale.id)
    ).filter(Sale.date >= today).one()
    purchases_total = db.query(func.coalesce(func.sum(Purchase.total), 0)).filter(Purchase.date >= today).scalar()
    unpaid_total = db.query(func.coalesce(func.sum(Purchase.total), 0)).filter(
        Purchase.payment_status != "paid"
    ).scalar()

    return {
        "total_items": db.query(func.count(Item.id)).scalar() or 0,
        "low_stock_items": _low_stock_query(db).count(),
        "total_patients": db.query(func.count(Patient.id)).scalar() or 0,
        "total_doctors": db.query(func.count(Doctor.id)).scalar() or 0,
        "total_suppliers": db.query(func.count(Supplier.id)).scalar() or 0,
        "today_sales_total": float(sales_total or 0),
        "today_sales_count": sales_count or 0,
        "today_purchases_total": float(purchases_total or 0),
        "unpaid_purchases_total": float(unpaid_total or 0),
    }


@router.get("/top-selling", response_model=List[TopSellingItem])
def top_selling(limit: int = Query(5, ge=1, le=100), db: Session = Depends(get_db),
                user: User = Depends(get_current_user)):
    total_quantity = func.sum(SaleItem.quantity).label("total_quantity")
    results = db.query(Item.name, total_quantity).join(
        SaleItem, SaleItem.item_id == Item.id
    ).group_by(Item.name).order_by(total_quantity.desc()).limit(limit).all()
    return [{"name": r.name, "total_quantity": int(r.total_quantity or 0)} for r in results]


@router.get("/low-stock", response_model=List[LowStockItem])
def low_stock(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return _low_stock_query(db).order_by(Item.stock.asc(), Item.name).all()
