import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError

# Import models to ensure they're registered with SQLAlchemy Base
from . import models  # noqa: F401
from .config import CORS_ORIGINS, LOG_LEVEL
from .database import Base, engine, is_transient_storage_error
from .domain.catalog.router import router as services_router
from .domain.clients.router import pets_router
from .domain.clients.router import router as clients_router
from .domain.scheduling.router import router as appointments_router
from .domain.shop.router import router as shop_router
from .domain.subscriptions.router import plans_router
from .domain.subscriptions.router import router as subscriptions_router
from .shared.errors import PetShopError, StorageConflictError

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🐾 Pet Shop API starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("✅ Database schema ready")
    except Exception as e:
        # Another worker may have created the tables concurrently
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("ℹ️ Database schema already created by another worker")
        else:
            logger.error(f"❌ Failed to create database schema: {e}")
            raise
    yield
    logger.info("Pet Shop API shutting down...")


app = FastAPI(title="Pet Shop API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Render malformed or missing request fields as INVALID_INPUT"""
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Invalid data.",
            "code": "INVALID_INPUT",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(PetShopError)
async def petshop_exception_handler(request: Request, exc: PetShopError):
    headers = {"Retry-After": "1"} if isinstance(exc, StorageConflictError) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.exception_handler(DBAPIError)
async def database_exception_handler(request: Request, exc: DBAPIError):
    if is_transient_storage_error(exc):
        logger.warning(f"{request.method} {request.url.path} - transaction aborted by a concurrent writer")
        conflict = StorageConflictError()
        return JSONResponse(status_code=conflict.status_code, content=conflict.to_dict(), headers={"Retry-After": "1"})
    logger.error(f"{request.method} {request.url.path} - Database error: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal database error", "code": "STORAGE_ERROR"})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


logger.info(f"CORS allowed origins: {CORS_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(shop_router)
app.include_router(services_router)
app.include_router(clients_router)
app.include_router(pets_router)
app.include_router(appointments_router)
app.include_router(plans_router)
app.include_router(subscriptions_router)


@app.get("/")
def root():
    return {"message": "Pet Shop API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
