import logging
from fastapi import APIRouter, BackgroundTasks, Depends, Query, HTTPException
from sqlalchemy.orm import Session, joinedload
from typing import List, Optional

from ..database import get_db
from ..models import Item, ItemUnit, PurchaseItem, SaleItem, User
from ..schemas.item_schemas import (
    ItemCreate, ItemUpdate, ItemResponse, ItemCodePreview,
    PricingRequest, PricingResponse
)
from ..schemas.common_schemas import PaginatedResponse, MessageResponse
from ..auth import get_current_user
from ..realtime import notify_change
from ..services.item_code import generate_item_code
from ..services.search import fuzzy_filter
from ..services.unit_conversion import (
    apply_conversion_prices, parse_unit_conversions, profit_percentage,
    sell_price_from_margin, validate_unit_conversions
)
from ..utils.pagination import paginate, page_response

logger = logging.getLogger(__name__)

router = APIRouter()

REQUIRED_ITEM_FIELDS = (
    "base_price", "sell_price", "min_stock", "is_active", "is_medicine", "has_expiry_date",
)

# ============ HELPERS ============

def _base_unit_name(db: Session, unit_id: Optional[int], base_unit: Optional[str]) -> Optional[str]:
    if base_unit:
        return base_unit
    if unit_id:
        unit = db.query(ItemUnit).filter(ItemUnit.id == unit_id).first()
        if unit:
            return unit.name
    return None

def _prepare_conversions(db: Session, conversions, base_unit, base_price, sell_price) -> List[dict]:
    units = db.query(ItemUnit).all()
    parsed = parse_unit_conversions(conversions, units)
    try:
        validate_unit_conversions(parsed, base_unit)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return apply_conversion_prices(base_price or 0, sell_price or 0, parsed)

def _ensure_unique_code(db: Session, code: Optional[str], item_id: Optional[int] = None):
    if not code:
        return
    query = db.query(Item).filter(Item.code == code)
    if item_id is not None:
        query = query.filter(Item.id != item_id)
    if query.first():
        raise HTTPException(status_code=400, detail=f"Item code '{code}' is already in use")

def _load_item(db: Session, item_id: int) -> Item:
    item = db.query(Item).options(
        joinedload(Item.category), joinedload(Item.type), joinedload(Item.unit)
    ).filter(Item.id == item_id).first()
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return item

# ============ ROUTES ============

@router.get("/", response_model=PaginatedResponse[ItemResponse])
def list_items(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user)
):
    query = db.query(Item).options(
        joinedload(Item.category), joinedload(Item.type), joinedload(Item.unit)
    )
    query = fuzzy_filter(query, search, Item.name, Item.code, Item.barcode)
    items, total, total_pages = paginate(query.order_by(Item.name), page, page_size)
    return page_response(items, total, page, page_size, total_pages)

@router.get("/code-preview", response_model=ItemCodePreview)
def preview_item_code(type_id: int, category_id: int, unit_id: int,
                      db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return {"code": generate_item_code(db, type_id, category_id, unit_id)}

@router.post("/pricing-preview", response_model=PricingResponse)
def preview_pricing(req: PricingRequest, user: User = Depends(get_current_user)):
    if req.sell_price is None and req.margin_percentage is None:
        raise HTTPException(status_code=400, detail="Provide either sell_price or margin_percentage")
    sell_price = req.sell_price
    if sell_price is None:
        sell_price = sell_price_from_margin(req.base_price, req.margin_percentage)

    conversions = parse_unit_conversions([c.dict() for c in req.unit_conversions])
    try:
        validate_unit_conversions(conversions)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "base_price": req.base_price,
        "sell_price": sell_price,
        "profit_percentage": profit_percentage(req.base_price, sell_price),
        "unit_conversions": apply_conversion_prices(req.base_price, sell_price, conversions),
    }

@router.get("/{item_id}", response_model=ItemResponse)
def get_item(item_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return _load_item(db, item_id)

@router.post("/", response_model=ItemResponse, status_code=201)
def create_item(item: ItemCreate, background_tasks: BackgroundTasks,
                db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    item_data = item.dict()
    conversions = item_data.pop("unit_conversions", [])

    item_data["base_unit"] = _base_unit_name(db, item_data["unit_id"], item_data["base_unit"])
    item_data["unit_conversions"] = _prepare_conversions(
        db, conversions, item_data["base_unit"], item_data["base_price"], item_data["sell_price"]
    )

    if not item_data.get("code") and item_data["type_id"] and item_data["category_id"] and item_data["unit_id"]:
        item_data["code"] = generate_item_code(db, item_data["type_id"], item_data["category_id"], item_data["unit_id"])
    _ensure_unique_code(db, item_data.get("code"))

    db_item = Item(**item_data, stock=0)
    db.add(db_item)
    db.commit()
    logger.info("Created item %s (%s)", db_item.id, db_item.code)
    notify_change(background_tasks, "items", "INSERT", db_item.id)
    return _load_item(db, db_item.id)

@router.put("/{item_id}", response_model=ItemResponse)
def update_item(item_id: int, item: ItemUpdate, background_tasks: BackgroundTasks,
                db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    db_item = db.query(Item).filter(Item.id == item_id).first()
    if not db_item:
        raise HTTPException(status_code=404, detail="Item not found")

    update_data = item.dict(exclude_unset=True)
    conversions = update_data.pop("unit_conversions", None)

    # An explicit null keeps the stored value
    for field in REQUIRED_ITEM_FIELDS:
        if field in update_data and update_data[field] is None:
            del update_data[field]

    if "name" in update_data:
        if not update_data["name"] or not update_data["name"].strip():
            raise HTTPException(status_code=400, detail="Name is required")
        update_data["name"] = update_data["name"].strip()
    if "code" in update_data:
        _ensure_unique_code(db, update_data["code"], item_id)

    for field, value in update_data.items():
        setattr(db_item, field, value)

    if "unit_id" in update_data and "base_unit" not in update_data:
        db_item.base_unit = _base_unit_name(db, db_item.unit_id, None)

    # Per-unit prices always follow the item's current prices
    if conversions is None:
        conversions = db_item.unit_conversions
    db_item.unit_conversions = _prepare_conversions(
        db, conversions, db_item.base_unit, db_item.base_price, db_item.sell_price
    )

    db.commit()
    notify_change(background_tasks, "items", "UPDATE", item_id)
    return _load_item(db, item_id)

@router.delete("/{item_id}", response_model=MessageResponse)
def delete_item(item_id: int, background_tasks: BackgroundTasks,
                db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    db_item = db.query(Item).filter(Item.id == item_id).first()
    if not db_item:
        raise HTTPException(status_code=404, detail="Item not found")

    has_purchases = db.query(PurchaseItem).filter(PurchaseItem.item_id == item_id).first() is not None
    has_sales = db.query(SaleItem).filter(SaleItem.item_id == item_id).first() is not None
    if has_purchases or has_sales:
        raise HTTPException(
            status_code=409,
            detail="Item has purchase or sale history and cannot be deleted. Deactivate it instead."
        )

    db.delete(db_item)
    db.commit()
    notify_change(background_tasks, "items", "DELETE", item_id)
    return {"message": "Item deleted successfully"}
