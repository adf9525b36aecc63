from sqlalchemy import Column, Integer, String, ForeignKey, Float, Text, Date, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from ..database import Base
from .inventory_models import TimestampMixin

# --- CLINIC ---

class Patient(Base, TimestampMixin):
    __tablename__ = "patients"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    gender = Column(String(10), nullable=True)
    birth_date = Column(Date, nullable=True)
    address = Column(Text, nullable=True)
    phone = Column(String(20), index=True, nullable=True)
    email = Column(String(100), nullable=True)
    image_url = Column(Text, nullable=True)

class Doctor(Base, TimestampMixin):
    __tablename__ = "doctors"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    specialization = Column(String(100), nullable=True)
    license_number = Column(String(50), nullable=True)
    phone = Column(String(20), nullable=True)
    email = Column(String(100), nullable=True)
    gender = Column(String(10), nullable=True)
    address = Column(Text, nullable=True)
    birth_date = Column(Date, nullable=True)
    experience_years = Column(Integer, nullable=True)
    qualification = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)

# --- SALES ---

class Sale(Base, TimestampMixin):
    __tablename__ = "sales"
    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String(100), unique=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=True)
    date = Column(DateTime, default=datetime.utcnow)
    total = Column(Float, default=0.0)
    payment_method = Column(String(20), default="cash")

    patient = relationship("Patient")
    doctor = relationship("Doctor")
    items = relationship("SaleItem", back_populates="sale", cascade="all, delete-orphan")

class SaleItem(Base, TimestampMixin):
    __tablename__ = "sale_items"
    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"))
    item_id = Column(Integer, ForeignKey("items.id"))
    quantity = Column(Integer, nullable=False)
    unit = Column(String(100), nullable=True)
    price = Column(Float, nullable=False)
    subtotal = Column(Float, nullable=False)

    sale = relationship("Sale", back_populates="items")
    item = relationship("Item")
