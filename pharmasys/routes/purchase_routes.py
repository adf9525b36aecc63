import logging
from fastapi import APIRouter, BackgroundTasks, Depends, Query, HTTPException
from sqlalchemy.orm import Session, joinedload
from typing import Optional
from datetime import datetime

from ..database import get_db
from ..models import Purchase, PurchaseItem, Supplier, Item, User
from ..schemas.procurement_schemas import (
    PurchaseCreate, PurchasePaymentUpdate, PurchaseListResponse, PurchaseResponse
)
from ..schemas.common_schemas import PaginatedResponse, MessageResponse
from ..auth import get_current_user
from ..realtime import notify_change
from ..services.stock_service import StockService
from ..utils.pagination import paginate, page_response

logger = logging.getLogger(__name__)

router = APIRouter()


def line_subtotal(quantity: float, price: float, discount: float) -> float:
    return round(quantity * price * (1 - (discount or 0) / 100), 2)


def _load_purchase(db: Session, purchase_id: int) -> Purchase:
    purchase = db.query(Purchase).options(
        joinedload(Purchase.supplier),
        joinedload(Purchase.items).joinedload(PurchaseItem.item),
    ).filter(Purchase.id == purchase_id).first()
    if not purchase:
        raise HTTPException(status_code=404, detail="Purchase not found")
    return purchase


@router.get("/", response_model=PaginatedResponse[PurchaseListResponse])
def list_purchases(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    supplier_id: Optional[int] = None,
    payment_status: Optional[str] = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user)
):
    query = db.query(Purchase).options(joinedload(Purchase.supplier))

    if search:
        query = query.filter(Purchase.invoice_number.ilike(f"%{search}%"))
    if supplier_id:
        query = query.filter(Purchase.supplier_id == supplier_id)
    if payment_status:
        query = query.filter(Purchase.payment_status == payment_status)

    items, total, total_pages = paginate(
        query.order_by(Purchase.date.desc(), Purchase.id.desc()), page, page_size
    )
    return page_response(items, total, page, page_size, total_pages)


@router.get("/{purchase_id}", response_model=PurchaseResponse)
def get_purchase(purchase_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return _load_purchase(db, purchase_id)


@router.post("/", response_model=PurchaseResponse, status_code=201)
def create_purchase(purchase_in: PurchaseCreate, background_tasks: BackgroundTasks,
                    db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    if purchase_in.supplier_id is not None:
        if not db.query(Supplier).filter(Supplier.id == purchase_in.supplier_id).first():
            raise HTTPException(status_code=404, detail="Supplier not found")

    item_ids = {line.item_id for line in purchase_in.items}
    found = {row.id for row in db.query(Item.id).filter(Item.id.in_(item_ids)).all()}
    missing = item_ids - found
    if missing:
        raise HTTPException(status_code=404, detail=f"Item(s) not found: {sorted(missing)}")

    db_purchase = Purchase(
        invoice_number=purchase_in.invoice_number,
        supplier_id=purchase_in.supplier_id,
        date=purchase_in.date or datetime.utcnow(),
        due_date=purchase_in.due_date,
        payment_status=purchase_in.payment_status,
        payment_method=purchase_in.payment_method,
        notes=purchase_in.notes,
    )
    total = 0.0
    for line in purchase_in.items:
        subtotal = line.subtotal
        if subtotal is None:
            subtotal = line_subtotal(line.quantity, line.price, line.discount)
        total += subtotal
        db_purchase.items.append(PurchaseItem(
            item_id=line.item_id,
            quantity=line.quantity,
            unit=line.unit,
            price=line.price,
            discount=line.discount,
            subtotal=subtotal,
            batch_no=line.batch_no,
            expiry_date=line.expiry_date,
        ))
    db_purchase.total = round(total, 2)

    try:
        db.add(db_purchase)
        db.flush()
        changed = StockService.apply_purchase_stock(db, db_purchase)
        db.commit()
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        db.rollback()
        logger.exception("Error creating purchase %s", purchase_in.invoice_number)
        raise

    notify_change(background_tasks, "purchases", "INSERT", db_purchase.id)
    for item_id in changed:
        notify_change(background_tasks, "items", "UPDATE", item_id)
    return _load_purchase(db, db_purchase.id)


@router.patch("/{purchase_id}/payment", response_model=PurchaseResponse)
def update_purchase_payment(purchase_id: int, payment: PurchasePaymentUpdate, background_tasks: BackgroundTasks,
                            db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    db_purchase = _load_purchase(db, purchase_id)
    for field, value in payment.dict(exclude_unset=True).items():
        if value is not None:
            setattr(db_purchase, field, value)
    db.commit()
    notify_change(background_tasks, "purchases", "UPDATE", purchase_id)
    return _load_purchase(db, purchase_id)


@router.delete("/{purchase_id}", response_model=MessageResponse)
def delete_purchase(purchase_id: int, background_tasks: BackgroundTasks,
                    db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    db_purchase = db.query(Purchase).filter(Purchase.id == purchase_id).first()
    if not db_purchase:
        raise HTTPException(status_code=404, detail="Purchase not found")

    # Stock rollback and deletion commit together or not at all
    try:
        changed = StockService.rollback_purchase_stock(db, db_purchase)
        db.delete(db_purchase)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Error deleting purchase %s", purchase_id)
        raise HTTPException(status_code=500, detail="Failed to delete purchase; stock left unchanged")

    notify_change(background_tasks, "purchases", "DELETE", purchase_id)
    for item_id in changed:
        notify_change(background_tasks, "items", "UPDATE", item_id)
    return {"message": "Purchase deleted successfully"}
