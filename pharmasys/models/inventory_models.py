from sqlalchemy import Column, Integer, String, Text, DateTime
from datetime import datetime
from ..database import Base

# Timestamp fields mixin
class TimestampMixin:
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

# --- ITEM MASTER DATA ---

class ItemCategory(Base, TimestampMixin):
    __tablename__ = "item_categories"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True) # Antibiotik, Analgesik...
    description = Column(Text, nullable=True)

class ItemType(Base, TimestampMixin):
    __tablename__ = "item_types"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True) # Obat Bebas, Obat Keras...
    description = Column(Text, nullable=True)

class ItemUnit(Base, TimestampMixin):
    __tablename__ = "item_units"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True) # Box, Strip, Tablet...
    description = Column(Text, nullable=True)
