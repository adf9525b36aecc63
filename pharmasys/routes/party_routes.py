import logging
from fastapi import APIRouter, BackgroundTasks, Depends, Query, File, HTTPException, UploadFile
from sqlalchemy.orm import Session
from typing import Optional

from ..database import get_db
from ..models import Patient, Doctor, Supplier, Purchase, Sale, User
from ..schemas.party_schemas import (
    PatientCreate, PatientUpdate, PatientResponse,
    DoctorCreate, DoctorUpdate, DoctorResponse,
    SupplierCreate, SupplierUpdate, SupplierResponse
)
from ..schemas.common_schemas import PaginatedResponse, MessageResponse
from ..auth import get_current_user
from ..realtime import notify_change
from ..services import storage
from ..services.search import fuzzy_filter
from ..utils.pagination import paginate, page_response

logger = logging.getLogger(__name__)


def create_party_routes(model_class, label: str, create_schema, update_schema, response_schema, references=()):
    """
    Router for a person/company table with an optional profile image.
    Images live in the storage bucket named after the table.
    """
    router = APIRouter()
    table = model_class.__tablename__
    not_found = f"{label.capitalize()} not found"

    def _get_or_404(db: Session, entity_id: int):
        entity = db.query(model_class).filter(model_class.id == entity_id).first()
        if not entity:
            raise HTTPException(status_code=404, detail=not_found)
        return entity

    @router.get("/", response_model=PaginatedResponse[response_schema], name=f"list_{table}")
    def list_entities(
        page: int = Query(1, ge=1),
        page_size: int = Query(10, ge=1, le=100),
        search: Optional[str] = None,
        db: Session = Depends(get_db),
        user: User = Depends(get_current_user)
    ):
        query = fuzzy_filter(db.query(model_class), search, model_class.name)
        items, total, total_pages = paginate(query.order_by(model_class.name), page, page_size)
        return page_response(items, total, page, page_size, total_pages)

    @router.get("/{entity_id}", response_model=response_schema, name=f"get_{table}")
    def get_entity(entity_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
        return _get_or_404(db, entity_id)

    @router.post("/", response_model=response_schema, status_code=201, name=f"create_{table}")
    def create_entity(data: create_schema, background_tasks: BackgroundTasks,
                      db: Session = Depends(get_db), user: User = Depends(get_current_user)):
        entity = model_class(**data.dict())
        db.add(entity)
        db.commit()
        db.refresh(entity)
        notify_change(background_tasks, table, "INSERT", entity.id)
        return entity

    @router.put("/{entity_id}", response_model=response_schema, name=f"update_{table}")
    def update_entity(entity_id: int, data: update_schema, background_tasks: BackgroundTasks,
                      db: Session = Depends(get_db), user: User = Depends(get_current_user)):
        entity = _get_or_404(db, entity_id)
        for field, value in data.dict(exclude_unset=True).items():
            setattr(entity, field, value)
        db.commit()
        db.refresh(entity)
        notify_change(background_tasks, table, "UPDATE", entity_id)
        return entity

    @router.delete("/{entity_id}", response_model=MessageResponse, name=f"delete_{table}")
    def delete_entity(entity_id: int, background_tasks: BackgroundTasks,
                      db: Session = Depends(get_db), user: User = Depends(get_current_user)):
        entity = _get_or_404(db, entity_id)
        for column in references:
            if db.query(column).filter(column == entity_id).first() is not None:
                raise HTTPException(
                    status_code=409,
                    detail=f"{label.capitalize()} has {column.class_.__tablename__} history and cannot be deleted",
                )
        image_path = storage.extract_path_from_url(entity.image_url)
        db.delete(entity)
        db.commit()
        storage.delete_stored_file(image_path)
        notify_change(background_tasks, table, "DELETE", entity_id)
        return {"message": f"{label.capitalize()} deleted successfully"}

    @router.post("/{entity_id}/image", response_model=response_schema, name=f"upload_{table}_image")
    def upload_image(entity_id: int, background_tasks: BackgroundTasks, file: UploadFile = File(...),
                     db: Session = Depends(get_db), user: User = Depends(get_current_user)):
        entity = _get_or_404(db, entity_id)
        old_path = storage.extract_path_from_url(entity.image_url)

        public_url, new_path = storage.save_entity_image(file, table, entity_id)
        entity.image_url = public_url
        try:
            db.commit()
        except Exception:
            db.rollback()
            storage.delete_stored_file(new_path)
            logger.exception("Error saving image for %s %s", label, entity_id)
            raise
        db.refresh(entity)

        if old_path:
            storage.delete_stored_file(old_path)
        notify_change(background_tasks, table, "UPDATE", entity_id)
        return entity

    @router.delete("/{entity_id}/image", response_model=response_schema, name=f"delete_{table}_image")
    def delete_image(entity_id: int, background_tasks: BackgroundTasks,
                     db: Session = Depends(get_db), user: User = Depends(get_current_user)):
        entity = _get_or_404(db, entity_id)
        if not entity.image_url:
            raise HTTPException(status_code=404, detail=f"{label.capitalize()} has no image")
        storage.delete_stored_file(storage.extract_path_from_url(entity.image_url))
        entity.image_url = None
        db.commit()
        db.refresh(entity)
        notify_change(background_tasks, table, "UPDATE", entity_id)
        return entity

    return router


patient_router = create_party_routes(
    Patient, "patient", PatientCreate, PatientUpdate, PatientResponse, references=(Sale.patient_id,)
)
doctor_router = create_party_routes(
    Doctor, "doctor", DoctorCreate, DoctorUpdate, DoctorResponse, references=(Sale.doctor_id,)
)
supplier_router = create_party_routes(
    Supplier, "supplier", SupplierCreate, SupplierUpdate, SupplierResponse, references=(Purchase.supplier_id,)
)
