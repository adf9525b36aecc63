import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import User
from ..schemas.user_schemas import Token, LoginRequest, UserResponse
from ..auth import verify_password, create_access_token, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/auth/login/", response_model=Token)
def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == login_data.email).first()

    if not user or not verify_password(login_data.password, user.hashed_password):
        logger.info("Failed login for %s", login_data.email)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User account is inactive")

    access_token = create_access_token(data={
        "sub": user.email,
        "id": user.id,
        "role": user.role,
    })
    return {"access_token": access_token, "token_type": "bearer"}

@router.get("/auth/me", response_model=UserResponse)
def read_me(user: User = Depends(get_current_user)):
    return user
