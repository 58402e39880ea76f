import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, status
from app.core.db import init_db, close_db
from app.api.admin import admin_router, auth_router, dashboard_router
from app.api.barcodes import router as barcodes_router
from app.api.components import router as components_router
from app.api.data_exchange import export_router, import_router
from app.api.facilities import facilities_router, locations_router
from app.api.inventory import router as inventory_router
from app.api.realtime import router as realtime_router
from app.api.transactions import router as transactions_router
from app.core.config import LOG_LEVEL, PROJECT_NAME, VERSION
from app.core.exception_handlers import setup_exception_handlers
from app.events.publisher import ConnectionManager

logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handles startup and shutdown events."""
    log.info(f"Starting {PROJECT_NAME} v{VERSION}...")
    await init_db() # Connect to DB and generate schemas
    yield
    await close_db()
    log.info(f"{PROJECT_NAME} stopped.")

app = FastAPI(
    title=PROJECT_NAME,
    version=VERSION,
    lifespan=lifespan,
    # Configure API documentation and paths
    docs_url="/docs",
    redoc_url="/redoc"
)

# Change notifications for connected clients, handed to the engine per request
app.state.publisher = ConnectionManager()

# Include routers for modular API structure
app.include_router(inventory_router, prefix="/api/inventory", tags=["Inventory"])
app.include_router(transactions_router, prefix="/api/transactions", tags=["Transactions"])
app.include_router(barcodes_router, prefix="/api", tags=["Barcodes"])
app.include_router(components_router, prefix="/api/components", tags=["Components"])
app.include_router(facilities_router, prefix="/api/facilities", tags=["Facilities"])
app.include_router(locations_router, prefix="/api/locations", tags=["Locations"])
app.include_router(dashboard_router, prefix="/api/dashboard", tags=["Dashboard"])
app.include_router(admin_router, prefix="/api/admin", tags=["Administration"])
app.include_router(auth_router, prefix="/api/auth", tags=["Authentication"])
app.include_router(export_router, prefix="/api/export", tags=["Export"])
app.include_router(import_router, prefix="/api/import", tags=["Import"])
app.include_router(realtime_router)


setup_exception_handlers(app)

@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """Simple health check endpoint."""
    return {"status": "ok", "app_name": PROJECT_NAME}
