from sqlalchemy import Column, Integer, String, Boolean, Text
from ..database import Base
from .inventory_models import TimestampMixin

class User(Base, TimestampMixin):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    role = Column(String(20), nullable=False, default="staff") # admin, staff
    hashed_password = Column(String, nullable=True)
    profilephoto = Column(Text, nullable=True) # Public URL
    profilephoto_path = Column(Text, nullable=True) # Path relative to the upload dir
    is_active = Column(Boolean, default=True)
