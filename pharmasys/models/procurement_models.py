from sqlalchemy import Column, Integer, String, ForeignKey, Float, Date, DateTime, Text
from sqlalchemy.orm import relationship
from datetime import datetime
from ..database import Base
from .inventory_models import TimestampMixin

# --- PURCHASES ---

class Purchase(Base, TimestampMixin):
    __tablename__ = "purchases"
    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String(100), index=True, nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=True)

    date = Column(DateTime, default=datetime.utcnow)
    due_date = Column(Date, nullable=True)

    total = Column(Float, default=0.0)
    payment_status = Column(String(20), default="unpaid") # unpaid, partial, paid
    payment_method = Column(String(20), default="cash") # cash, transfer, credit
    notes = Column(Text, nullable=True)

    supplier = relationship("Supplier")
    items = relationship(
        "PurchaseItem",
        back_populates="purchase",
        cascade="all, delete-orphan",
    )

class PurchaseItem(Base):
    __tablename__ = "purchase_items"
    id = Column(Integer, primary_key=True, index=True)
    purchase_id = Column(Integer, ForeignKey("purchases.id"), nullable=False)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False)

    quantity = Column(Float, nullable=False) # In `unit`, not necessarily the base unit
    unit = Column(String(100), nullable=True)
    price = Column(Float, default=0.0)
    discount = Column(Float, default=0.0) # Percent
    subtotal = Column(Float, default=0.0)

    batch_no = Column(String(100), nullable=True)
    expiry_date = Column(Date, nullable=True)

    purchase = relationship("Purchase", back_populates="items")
    item = relationship("Item")
