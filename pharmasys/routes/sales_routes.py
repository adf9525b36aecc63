import logging
import re
from fastapi import APIRouter, BackgroundTasks, Depends, Query, HTTPException
from sqlalchemy.orm import Session, joinedload
from typing import Optional
from datetime import datetime

from ..database import get_db
from ..models import Sale, SaleItem, Item, Patient, Doctor, User
from ..schemas.sales_schemas import SaleCreate, SaleResponse
from ..schemas.common_schemas import PaginatedResponse
from ..auth import get_current_user
from ..realtime import notify_change
from ..services.stock_service import StockService
from ..services.unit_conversion import unit_sell_price
from ..utils.pagination import paginate, page_response

logger = logging.getLogger(__name__)

router = APIRouter()


def generate_next_invoice_number(last_invoice_number: Optional[str]) -> str:
    new_invoice_number = "INV-000001"
    if last_invoice_number:
        match = re.search(r"INV-(\d+)", last_invoice_number)
        if match:
            new_invoice_number = f"INV-{int(match.group(1)) + 1:06d}"
    return new_invoice_number


def _load_sale(db: Session, sale_id: int) -> Sale:
    sale = db.query(Sale).options(
        joinedload(Sale.patient),
        joinedload(Sale.doctor),
        joinedload(Sale.items).joinedload(SaleItem.item),
    ).filter(Sale.id == sale_id).first()
    if not sale:
        raise HTTPException(status_code=404, detail="Sale not found")
    return sale


@router.get("/", response_model=PaginatedResponse[SaleResponse])
def list_sales(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user)
):
    query = db.query(Sale).options(
        joinedload(Sale.patient), joinedload(Sale.doctor),
        joinedload(Sale.items).joinedload(SaleItem.item),
    )
    if search:
        query = query.filter(Sale.invoice_number.ilike(f"%{search}%"))
    items, total, total_pages = paginate(query.order_by(Sale.date.desc(), Sale.id.desc()), page, page_size)
    return page_response(items, total, page, page_size, total_pages)


@router.get("/{sale_id}", response_model=SaleResponse)
def get_sale(sale_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return _load_sale(db, sale_id)


@router.post("/", response_model=SaleResponse, status_code=201)
def create_sale(sale_in: SaleCreate, background_tasks: BackgroundTasks,
                db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    if sale_in.patient_id and not db.query(Patient).filter(Patient.id == sale_in.patient_id).first():
        raise HTTPException(status_code=404, detail="Patient not found")
    if sale_in.doctor_id and not db.query(Doctor).filter(Doctor.id == sale_in.doctor_id).first():
        raise HTTPException(status_code=404, detail="Doctor not found")

    last_sale = db.query(Sale).order_by(Sale.id.desc()).first()
    db_sale = Sale(
        invoice_number=generate_next_invoice_number(last_sale.invoice_number if last_sale else None),
        patient_id=sale_in.patient_id,
        doctor_id=sale_in.doctor_id,
        payment_method=sale_in.payment_method,
        date=datetime.utcnow(),
    )

    try:
        total = 0.0
        for line in sale_in.items:
            item = db.query(Item).filter(Item.id == line.item_id).first()
            if not item:
                raise HTTPException(status_code=404, detail=f"Item {line.item_id} not found")
            price = line.price if line.price is not None else unit_sell_price(item, line.unit)
            subtotal = round(price * line.quantity, 2)
            total += subtotal
            db_sale.items.append(SaleItem(
                item_id=item.id, quantity=line.quantity, unit=line.unit or item.base_unit,
                price=price, subtotal=subtotal,
            ))
        db_sale.total = round(total, 2)

        db.add(db_sale)
        db.flush()
        changed = StockService.deduct_sale_stock(db, db_sale)
        db.commit()
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except HTTPException:
        db.rollback()
        raise

    notify_change(background_tasks, "sales", "INSERT", db_sale.id)
    for item_id in changed:
        notify_change(background_tasks, "items", "UPDATE", item_id)
    return _load_sale(db, db_sale.id)
