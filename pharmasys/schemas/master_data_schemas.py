from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime

class MasterDataBase(BaseModel):
    name: str
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v):
        if v is None or not v.strip():
            raise ValueError("Name is required")
        return v.strip()

class MasterDataCreate(MasterDataBase):
    pass

class MasterDataUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v):
        if v is None or not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()

class MasterDataResponse(MasterDataBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
