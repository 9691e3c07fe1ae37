"""
Shipping Service
Customers, orders, CSV bulk import, carrier rate quotes and label purchase
"""

from contextlib import asynccontextmanager
import os
import subprocess
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Allow running from services/shipping without installing the package
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../../"))

from shared.core import ServiceHealth, setup_logging, RequestLoggingMiddleware, get_logger
from app.core_settings import get_settings
from app.api.customers import router as customers_router
from app.api.orders import router as orders_router
from app.api.shipments import router as shipments_router
from app.application.csv_ingest import DELIMITERS
from app.infrastructure.db import get_engine, init_models

SERVICE_NAME = "shipping-service"
SERVICE_DESCRIPTION = "Shipping management: orders, bulk CSV import, rates and labels"
SERVICE_ROOT = os.path.join(os.path.dirname(__file__), "..")

settings = get_settings()
setup_logging(service_name=SERVICE_NAME, level=settings.LOG_LEVEL, log_file=settings.LOG_FILE)
logger = get_logger(__name__)

def run_migrations() -> bool:
    """Apply pending alembic revisions; a failure is logged and startup goes on."""
    try:
        result = subprocess.run(["alembic", "upgrade", "head"], cwd=SERVICE_ROOT,
                                capture_output=True, text=True, check=False)
    except OSError as e:
        logger.error(f"Could not run alembic: {e}")
        return False
    if result.returncode != 0:
        logger.warning("alembic upgrade failed", extra={'extra_fields': {'stderr': result.stderr}})
        return False
    logger.info("Schema is at alembic head")
    return True

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{SERVICE_NAME} {settings.SERVICE_VERSION} starting")
    if settings.RUN_MIGRATIONS:
        run_migrations()
    # tables missing after migrations (or with migrations off) are created directly
    init_models()
    yield
    logger.info(f"{SERVICE_NAME} stopped")

app = FastAPI(
    title=SERVICE_NAME,
    description=SERVICE_DESCRIPTION,
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)

# the dashboard is served from another origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "Content-Disposition"],
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(ServiceHealth(SERVICE_NAME, settings.SERVICE_VERSION, engine_provider=get_engine).create_health_router())
app.include_router(customers_router)
app.include_router(orders_router)
app.include_router(shipments_router)

@app.get("/")
async def root():
    return {"service": SERVICE_NAME, "version": settings.SERVICE_VERSION, "docs": app.docs_url}

@app.get("/info")
async def info():
    return {
        "service": SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "description": SERVICE_DESCRIPTION,
        "upload": {
            "endpoint": "/orders/upload-csv",
            "template": "/orders/csv-template",
            "max_bytes": settings.MAX_UPLOAD_BYTES,
            "extensions": sorted(DELIMITERS),
        },
        "probes": ["/health", "/health/live", "/health/ready", "/health/startup", "/metrics"],
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
