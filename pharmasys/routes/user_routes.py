import logging
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session
from typing import List

from ..database import get_db
from ..models import User
from ..schemas.user_schemas import UserUpdate, UserResponse
from ..auth import get_current_user, get_password_hash, require_admin
from ..services import storage

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/", response_model=List[UserResponse])
def list_users(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return db.query(User).order_by(User.name).all()

@router.put("/me", response_model=UserResponse)
def update_me(user_in: UserUpdate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    update_data = user_in.dict(exclude_unset=True)
    if "name" in update_data:
        if not update_data["name"] or not update_data["name"].strip():
            raise HTTPException(status_code=400, detail="Name cannot be empty")
        user.name = update_data["name"].strip()
    if update_data.get("password"):
        user.hashed_password = get_password_hash(update_data["password"])
    db.commit()
    db.refresh(user)
    return user

@router.post("/me/photo", response_model=UserResponse)
def upload_profile_photo(file: UploadFile = File(...), db: Session = Depends(get_db),
                         user: User = Depends(get_current_user)):
    old_path = user.profilephoto_path
    public_url, relative_path = storage.save_entity_image(file, "profiles", user.id)
    user.profilephoto = public_url
    user.profilephoto_path = relative_path
    try:
        db.commit()
    except Exception:
        db.rollback()
        storage.delete_stored_file(relative_path)
        logger.exception("Error saving profile photo for user %s", user.id)
        raise
    db.refresh(user)
    storage.delete_stored_file(old_path)
    return user

@router.delete("/me/photo", response_model=UserResponse)
def delete_profile_photo(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    if not user.profilephoto_path:
        raise HTTPException(status_code=404, detail="No profile photo")
    storage.delete_stored_file(user.profilephoto_path)
    user.profilephoto = None
    user.profilephoto_path = None
    db.commit()
    db.refresh(user)
    return user
