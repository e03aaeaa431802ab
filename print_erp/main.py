from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError
from print_erp.core.config import settings
from print_erp.core.database import SessionLocal
from print_erp.core.exceptions import ERPError
from print_erp.core.logging_config import setup_logging, get_logger
from print_erp.core.middleware import RequestIDMiddleware
from print_erp.api.v1 import api_router

setup_logging()
logger = get_logger(__name__)

app = FastAPI(
    title="Print Shop ERP - Procurement",
    description="Suppliers, inventory, quotation requests, purchase orders and supplier payments",
    version="1.0.0"
)

if settings.LOG_REQUEST_ID:
    app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

app.include_router(api_router, prefix="/api/v1")

@app.exception_handler(ERPError)
async def erp_error_handler(request: Request, exc: ERPError):
    logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

@app.exception_handler(StaleDataError)
async def stale_data_handler(request: Request, exc: StaleDataError):
    logger.warning(f"Concurrent update detected on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=409,
        content={"detail": "The record was changed by someone else. Reload and try again."}
    )

@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    msg = str(getattr(exc, "orig", exc))
    logger.warning(f"IntegrityError on {request.url.path}: {msg}")
    if "unique" in msg.lower():
        detail = "A record with this number already exists."
    elif "foreign key" in msg.lower():
        detail = "The record is referenced by other data."
    else:
        detail = "Data integrity violation."
    return JSONResponse(status_code=409, content={"detail": detail})

@app.get("/")
async def root():
    return {"message": "Print Shop ERP API", "version": "1.0.0"}

@app.get("/health")
def health():
    """Health check with database connectivity"""
    health_info = {"status": "healthy", "service": "Print Shop ERP API", "version": "1.0.0"}
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        health_info["database"] = "connected"
    except Exception as e:
        logger.error(f"Health check database error: {e}")
        health_info["database"] = f"error: {str(e)}"
        health_info["status"] = "degraded"
    finally:
        db.close()
    return health_info
