from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Float, Text, JSON
from sqlalchemy.orm import relationship
from ..database import Base
from .inventory_models import TimestampMixin

# --- PHARMACY CORE ---

class Item(Base, TimestampMixin):
    __tablename__ = "items"
    id = Column(Integer, primary_key=True, index=True)

    # Identification
    code = Column(String(50), unique=True, index=True, nullable=True) # e.g. BTAN01
    name = Column(String(255), nullable=False, index=True)
    barcode = Column(String(100), index=True, nullable=True)
    rack = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)

    category_id = Column(Integer, ForeignKey("item_categories.id"), nullable=True)
    type_id = Column(Integer, ForeignKey("item_types.id"), nullable=True)
    unit_id = Column(Integer, ForeignKey("item_units.id"), nullable=True)

    # Pricing and stock, all expressed in the base unit
    base_unit = Column(String(100), nullable=True)
    base_price = Column(Float, default=0.0)
    sell_price = Column(Float, default=0.0)
    stock = Column(Float, default=0.0)
    min_stock = Column(Integer, default=10)

    # Flags
    is_active = Column(Boolean, default=True)
    is_medicine = Column(Boolean, default=True)
    has_expiry_date = Column(Boolean, default=False)

    # [{unit_name, to_unit_id, conversion_rate, base_price, sell_price}]
    unit_conversions = Column(JSON, default=list)

    category = relationship("ItemCategory")
    type = relationship("ItemType")
    unit = relationship("ItemUnit")

class Supplier(Base, TimestampMixin):
    __tablename__ = "suppliers"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    address = Column(Text, nullable=True)
    phone = Column(String(20), nullable=True)
    email = Column(String(100), nullable=True)
    contact_person = Column(String(100), nullable=True)
    image_url = Column(Text, nullable=True)
