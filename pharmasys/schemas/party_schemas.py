from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import date, datetime

# --- Shared ---

class PartyBase(BaseModel):
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Name is required")
        return v.strip()

class PartyUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v):
        if v is None or not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()

class PartyResponseMixin(BaseModel):
    id: int
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

# --- Patients ---

class PatientCreate(PartyBase):
    gender: Optional[str] = None
    birth_date: Optional[date] = None

class PatientUpdate(PartyUpdate):
    gender: Optional[str] = None
    birth_date: Optional[date] = None

class PatientResponse(PatientCreate, PartyResponseMixin):
    class Config:
        from_attributes = True

# --- Doctors ---

class DoctorCreate(PartyBase):
    specialization: Optional[str] = None
    license_number: Optional[str] = None
    gender: Optional[str] = None
    birth_date: Optional[date] = None
    experience_years: Optional[int] = None
    qualification: Optional[str] = None

class DoctorUpdate(PartyUpdate):
    specialization: Optional[str] = None
    license_number: Optional[str] = None
    gender: Optional[str] = None
    birth_date: Optional[date] = None
    experience_years: Optional[int] = None
    qualification: Optional[str] = None

class DoctorResponse(DoctorCreate, PartyResponseMixin):
    class Config:
        from_attributes = True

# --- Suppliers ---

class SupplierCreate(PartyBase):
    contact_person: Optional[str] = None

class SupplierUpdate(PartyUpdate):
    contact_person: Optional[str] = None

class SupplierResponse(SupplierCreate, PartyResponseMixin):
    class Config:
        from_attributes = True
