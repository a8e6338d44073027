"""
FastAPI Production Application

Main entry point for the Storefront Catalog API.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from storefront.catalog.errors import CatalogError
from storefront.config import get_settings
from storefront.config.logging import configure_logging
from storefront.database.connection import init_database, close_database
from storefront.serving.cache import init_redis, close_redis
from storefront.serving.api.middleware import RequestLoggingMiddleware
from storefront.serving.api.routes import (
    health_router,
    products_router,
    promotions_router,
    reference_router,
)

settings = get_settings()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()

    logger.info("Starting Storefront Catalog API", environment=settings.app_env)

    # Endpoints fail soft without a store, so startup continues either way
    try:
        await init_database()
    except Exception as e:
        logger.warning("Database init failed", error=str(e))

    try:
        await init_redis()
    except Exception as e:
        logger.warning("Redis init failed, serving without cache", error=str(e))

    yield

    logger.info("Shutting down...")
    await close_database()
    await close_redis()


app = FastAPI(
    title="Storefront Catalog API",
    description="Catalog pricing and promotion resolution for the storefront",
    version=settings.version,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.security.cors_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    """Render engine errors in the ``{success, error}`` envelope."""
    log = logger.error if exc.http_status >= 500 else logger.info
    log("Request failed", path=request.url.path, code=exc.code, error=exc.message)
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


app.include_router(health_router, prefix="/api/v1", tags=["Health"])
app.include_router(products_router, prefix="/api/v1/products", tags=["Products"])
app.include_router(promotions_router, prefix="/api/v1", tags=["Promotions"])
app.include_router(reference_router, prefix="/api/v1", tags=["Reference"])


@app.get("/api/v1/info")
async def api_info():
    """API information endpoint."""
    return {
        "name": "Storefront Catalog API",
        "version": settings.version,
        "environment": settings.app_env,
        "currency": settings.catalog.currency,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
