import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import IntegrityError

from .config import settings, configure_logging
from .database import engine, Base, SessionLocal
from .models import User
from .auth import get_password_hash
from .routes import api_router

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME)

os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount(settings.MEDIA_URL, StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def _cors_headers(request: Request) -> dict:
    origin = request.headers.get("origin")
    headers = {}
    if origin:
        headers["Access-Control-Allow-Origin"] = origin
        headers["Access-Control-Allow-Credentials"] = "true"
    return headers

@app.exception_handler(IntegrityError)
async def integrity_exception_handler(request: Request, exc: IntegrityError):
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(
        status_code=409,
        content={"detail": "The change conflicts with existing data"},
        headers=_cors_headers(request)
    )

# GLOBAL EXCEPTION HANDLER
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": f"INTERNAL SERVER ERROR: {str(exc)}"},
        headers=_cors_headers(request)
    )

@app.get("/")
def read_root():
    return {"status": "ok", "message": "Backend is running"}

@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.debug("Request %s %s from Origin: %s", request.method, request.url.path, request.headers.get("origin"))
    response = await call_next(request)
    return response

# Include all routes
app.include_router(api_router)

def init_db():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        admin = db.query(User).filter(User.email == settings.ADMIN_EMAIL).first()
        if not admin:
            db.add(User(
                name="Administrator",
                email=settings.ADMIN_EMAIL,
                role="admin",
                hashed_password=get_password_hash(settings.ADMIN_PASSWORD),
            ))
            db.commit()
            logger.info("Seeded admin user %s", settings.ADMIN_EMAIL)
    finally:
        db.close()

# --- STARTUP ---
@app.on_event("startup")
def startup():
    init_db()
