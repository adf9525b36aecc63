# Routes package
from fastapi import APIRouter
from .auth_routes import router as auth_router
from .user_routes import router as user_router
from .master_data_routes import router as master_data_router
from .item_routes import router as item_router
from .party_routes import patient_router, doctor_router, supplier_router
from .purchase_routes import router as purchase_router
from .sales_routes import router as sales_router
from .dashboard_routes import router as dashboard_router
from ..realtime import router as realtime_router

# Create main router
api_router = APIRouter()

# Include all route modules
api_router.include_router(auth_router, tags=["Authentication"])
api_router.include_router(user_router, prefix="/users", tags=["Users"])
api_router.include_router(master_data_router, prefix="/master-data", tags=["Master Data"])
api_router.include_router(item_router, prefix="/items", tags=["Items"])
api_router.include_router(patient_router, prefix="/patients", tags=["Patients"])
api_router.include_router(doctor_router, prefix="/doctors", tags=["Doctors"])
api_router.include_router(supplier_router, prefix="/suppliers", tags=["Suppliers"])
api_router.include_router(purchase_router, prefix="/purchases", tags=["Purchases"])
api_router.include_router(sales_router, prefix="/sales", tags=["Sales"])
api_router.include_router(dashboard_router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(realtime_router, tags=["Realtime"])


__all__ = ["api_router"]
