import logging
from fastapi import APIRouter, BackgroundTasks, Depends, Query, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import List, Optional

from ..database import get_db
from ..models import ItemCategory, ItemType, ItemUnit, Item, User
from ..schemas.master_data_schemas import MasterDataCreate, MasterDataUpdate, MasterDataResponse
from ..schemas.common_schemas import PaginatedResponse, MessageResponse
from ..auth import get_current_user
from ..realtime import notify_change
from ..services.search import fuzzy_filter
from ..utils.pagination import paginate, page_response

logger = logging.getLogger(__name__)

router = APIRouter()

# ============ GENERIC CRUD FUNCTIONS ============

def create_crud_routes(model_class, router_prefix: str, label: str, references=(),
                       create_schema=MasterDataCreate, update_schema=MasterDataUpdate,
                       response_schema=MasterDataResponse):
    """
    Register list/search/get/create/update/delete routes for a name+description table.

    ``references`` lists columns on other tables pointing at this one; a row
    that is still referenced cannot be deleted.
    """
    table = model_class.__tablename__

    @router.get(f"/{router_prefix}", response_model=PaginatedResponse[response_schema], name=f"list_{table}")
    def list_items(
        page: int = Query(1, ge=1),
        page_size: int = Query(10, ge=1, le=100),
        search: Optional[str] = None,
        db: Session = Depends(get_db),
        user: User = Depends(get_current_user)
    ):
        query = fuzzy_filter(db.query(model_class), search, model_class.name, model_class.description)
        items, total, total_pages = paginate(query.order_by(model_class.name), page, page_size)
        return page_response(items, total, page, page_size, total_pages)

    @router.get(f"/{router_prefix}/all", response_model=List[response_schema], name=f"list_all_{table}")
    def list_all_items(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
        return db.query(model_class).order_by(model_class.name).all()

    @router.post(f"/{router_prefix}", response_model=response_schema, status_code=201, name=f"create_{table}")
    def create_item(item: create_schema, background_tasks: BackgroundTasks,
                    db: Session = Depends(get_db), user: User = Depends(get_current_user)):
        db_item = model_class(**item.dict())
        db.add(db_item)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning("Could not create %s: %s", label, e)
            raise HTTPException(status_code=400, detail=f"Failed to add {label}")
        db.refresh(db_item)
        notify_change(background_tasks, table, "INSERT", db_item.id)
        return db_item

    @router.get(f"/{router_prefix}/{{item_id}}", response_model=response_schema, name=f"get_{table}")
    def get_item(item_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
        item = db.query(model_class).filter(model_class.id == item_id).first()
        if not item:
            raise HTTPException(status_code=404, detail=f"{label.capitalize()} not found")
        return item

    @router.put(f"/{router_prefix}/{{item_id}}", response_model=response_schema, name=f"update_{table}")
    def update_item(item_id: int, item: update_schema, background_tasks: BackgroundTasks,
                    db: Session = Depends(get_db), user: User = Depends(get_current_user)):
        db_item = db.query(model_class).filter(model_class.id == item_id).first()
        if not db_item:
            raise HTTPException(status_code=404, detail=f"{label.capitalize()} not found")

        for field, value in item.dict(exclude_unset=True).items():
            setattr(db_item, field, value)

        db.commit()
        db.refresh(db_item)
        notify_change(background_tasks, table, "UPDATE", item_id)
        return db_item

    @router.delete(f"/{router_prefix}/{{item_id}}", response_model=MessageResponse, name=f"delete_{table}")
    def delete_item(item_id: int, background_tasks: BackgroundTasks,
                    db: Session = Depends(get_db), user: User = Depends(get_current_user)):
        db_item = db.query(model_class).filter(model_class.id == item_id).first()
        if not db_item:
            raise HTTPException(status_code=404, detail=f"{label.capitalize()} not found")

        for column in references:
            in_use = db.query(column).filter(column == item_id).count()
            if in_use:
                raise HTTPException(
                    status_code=409,
                    detail=f"{label.capitalize()} is still used by {in_use} row(s) in {column.class_.__tablename__}",
                )

        try:
            db.delete(db_item)
            db.commit()
        except IntegrityError:
            db.rollback()
            raise HTTPException(status_code=409, detail=f"{label.capitalize()} is still in use")
        notify_change(background_tasks, table, "DELETE", item_id)
        return {"message": f"{label.capitalize()} deleted successfully"}

    return router

# ============ ITEM CATEGORIES ============
create_crud_routes(ItemCategory, "categories", "category", references=(Item.category_id,))

# ============ ITEM TYPES ============
create_crud_routes(ItemType, "types", "item type", references=(Item.type_id,))

# ============ ITEM UNITS ============
create_crud_routes(ItemUnit, "units", "unit", references=(Item.unit_id,))
