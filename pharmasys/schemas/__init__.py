# Schemas package - exports all Pydantic models
from .common_schemas import PaginatedResponse, MessageResponse
from .user_schemas import Token, LoginRequest, UserUpdate, UserResponse
from .master_data_schemas import MasterDataCreate, MasterDataUpdate, MasterDataResponse
from .item_schemas import (
    UnitConversionData, NamedRef, ItemCreate, ItemUpdate, ItemResponse,
    ItemCodePreview, PricingRequest, PricingResponse
)
from .party_schemas import (
    PatientCreate, PatientUpdate, PatientResponse,
    DoctorCreate, DoctorUpdate, DoctorResponse,
    SupplierCreate, SupplierUpdate, SupplierResponse
)
from .procurement_schemas import (
    PurchaseItemCreate, PurchaseCreate, PurchasePaymentUpdate,
    PurchaseListResponse, PurchaseResponse
)
from .sales_schemas import SaleItemCreate, SaleCreate, SaleResponse
from .dashboard_schemas import DashboardSummary, TopSellingItem, LowStockItem

__all__ = [
    "PaginatedResponse",
    "MessageResponse",
    "Token",
    "LoginRequest",
    "UserUpdate",
    "UserResponse",
    "MasterDataCreate",
    "MasterDataUpdate",
    "MasterDataResponse",
    "UnitConversionData",
    "NamedRef",
    "ItemCreate",
    "ItemUpdate",
    "ItemResponse",
    "ItemCodePreview",
    "PricingRequest",
    "PricingResponse",
    "PatientCreate",
    "PatientUpdate",
    "PatientResponse",
    "DoctorCreate",
    "DoctorUpdate",
    "DoctorResponse",
    "SupplierCreate",
    "SupplierUpdate",
    "SupplierResponse",
    "PurchaseItemCreate",
    "PurchaseCreate",
    "PurchasePaymentUpdate",
    "PurchaseListResponse",
    "PurchaseResponse",
    "SaleItemCreate",
    "SaleCreate",
    "SaleResponse",
    "DashboardSummary",
    "TopSellingItem",
    "LowStockItem",
]
