"""
Storefront Plugins Backend
FastAPI application entry point

- Store-scoped plugin configuration (PayPal Direct, Canada Post)
- Checkout endpoints for card payments and realtime shipping rates
- Admin campaign list
- Error sanitization middleware
- Health endpoint with DB ping
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from decimal import Decimal

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from sqlalchemy import func, select, text

from storefront.api.routes import campaigns, plugins
from storefront.core.config import settings
from storefront.core.database import AsyncSessionLocal, Base, engine, get_db_session
from storefront.core.error_handler import ErrorSanitizationMiddleware
from storefront.models import Currency, MeasureDimension, MeasureWeight, Store
from storefront.models.directory import DEFAULT_CURRENCIES, DEFAULT_MEASURE_DIMENSIONS, DEFAULT_MEASURE_WEIGHTS
from storefront.models.store import DEFAULT_STORES
from storefront.plugins.payments.paypal_direct import routes as paypal_direct_routes
from storefront.plugins.shipping.canada_post import routes as canada_post_routes

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)

# Numeric columns are seeded from strings to keep exact ratios
DECIMAL_SEED_FIELDS = ("rate", "ratio")


async def seed_directory_if_needed():
    """Insert default stores, currencies and measures into empty tables."""
    seeds = [
        (Store, DEFAULT_STORES),
        (Currency, DEFAULT_CURRENCIES),
        (MeasureWeight, DEFAULT_MEASURE_WEIGHTS),
        (MeasureDimension, DEFAULT_MEASURE_DIMENSIONS),
    ]
    async with get_db_session() as db:
        for model, rows in seeds:
            count = (await db.execute(select(func.count()).select_from(model))).scalar() or 0
            if count:
                continue
            for row in rows:
                values = {
                    key: Decimal(value) if key in DECIMAL_SEED_FIELDS else value
                    for key, value in row.items()
                }
                db.add(model(**values))
            logger.info(f"Seeded {len(rows)} rows into {model.__tablename__}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and seed directory data in development."""
    if settings.AUTO_CREATE_TABLES:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await seed_directory_if_needed()
        logger.info("Database tables ready")

    yield

    await engine.dispose()
    logger.info("Database engine disposed")


app = FastAPI(
    lifespan=lifespan,
    title=f"{settings.APP_NAME} API",
    description="""
## Storefront Plugins API

### Features
- **Plugin configuration**: per-store settings with override-for-store flags
- **PayPal Direct**: credit card form, validation and payment processing
- **Canada Post**: realtime shipping rates and parcel tracking
- **Campaigns**: admin list filters by store and customer role

### Authentication
Admin endpoints require a JWT bearer token of an admin customer.
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Error sanitization (catches unhandled exceptions)
app.add_middleware(ErrorSanitizationMiddleware)

# CORS - adjust origins for production
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(plugins.router, prefix="/api", tags=["Admin - Plugins"])
app.include_router(campaigns.router, prefix="/api", tags=["Admin - Campaigns"])
app.include_router(paypal_direct_routes.admin_router, prefix="/api", tags=["Admin - Plugins"])
app.include_router(paypal_direct_routes.router, prefix="/api", tags=["Payments"])
app.include_router(canada_post_routes.admin_router, prefix="/api", tags=["Admin - Plugins"])
app.include_router(canada_post_routes.router, prefix="/api", tags=["Shipping"])


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check with DB ping. Returns 503 if the database is unreachable."""
    health_status = {
        "status": "healthy",
        "database": "unknown",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    try:
        async with AsyncSessionLocal() as db:
            await db.execute(text("SELECT 1"))
        health_status["database"] = "connected"
    except Exception as e:
        health_status["database"] = f"error: {type(e).__name__}"
        health_status["status"] = "unhealthy"
        logger.error(f"Health check database ping failed: {e}")
        return JSONResponse(status_code=503, content=health_status)

    return health_status
