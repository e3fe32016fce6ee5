"""
MenuSight - Main FastAPI Application
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from menusight.config import settings

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Restaurant admin console: menu category trees, sales-method and price propagation across branches",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


@app.get("/api/config")
async def public_config():
    """Public config for the frontend. No secrets."""
    return {
        "app_name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "category_sort_locale": settings.CATEGORY_SORT_LOCALE,
        "category_indent_unit": settings.CATEGORY_INDENT_UNIT,
        "price_replace_strategy": settings.price_replace_strategy,
    }


@app.on_event("startup")
def log_backoffice_target():
    """Log where back-office calls go so a wrong BACKOFFICE_API_URL is obvious."""
    logger.info(
        "Back office: %s (token=%s, timeout=%ss, propagation workers=%s, price strategy=%s)",
        settings.backoffice_base_url,
        "set" if settings.BACKOFFICE_API_TOKEN else "empty",
        settings.BACKOFFICE_TIMEOUT_SECONDS,
        settings.PROPAGATION_MAX_WORKERS or "one per pair",
        settings.price_replace_strategy,
    )
    if settings.PRICE_REPLACE_STRATEGY and settings.PRICE_REPLACE_STRATEGY != settings.price_replace_strategy:
        logger.warning(
            "Unknown PRICE_REPLACE_STRATEGY=%r; using %r",
            settings.PRICE_REPLACE_STRATEGY,
            settings.price_replace_strategy,
        )


# Import and include routers
from menusight.api import branches_router, ingredients_router, menus_router, products_router

app.include_router(menus_router, prefix="/api", tags=["Menu Categories"])
app.include_router(branches_router, prefix="/api", tags=["Branch Sales Methods"])
app.include_router(products_router, prefix="/api", tags=["Product Prices"])
app.include_router(ingredients_router, prefix="/api", tags=["Product Ingredients"])
