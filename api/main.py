"""
FastAPI application for the transport order dashboard
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routers.health import router as health_router
from api.routers.orders import router as orders_router
from config.settings import Settings, get_settings
from core.database import create_db_engine, create_session_factory, create_tables
from core.exceptions import OrderStoreError
from services.order_service import OrderService
from services.order_store import OrderStore

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def configure_logging(settings: Settings):
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    settings: Settings = app.state.settings
    logger.info("Starting transport order dashboard API...")

    if settings.DATABASE_CREATE_TABLES:
        create_tables(app.state.engine)

    logger.info("Application startup completed")

    yield

    logger.info("Shutting down application...")
    app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application with its database engine, store and service"""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Transport Order Dashboard",
        description="Review and triage transport orders parsed from incoming email and PDF.",
        version=API_VERSION,
        debug=settings.API_DEBUG,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    engine = create_db_engine(settings)
    store = OrderStore(create_session_factory(engine))
    app.state.settings = settings
    app.state.engine = engine
    app.state.order_service = OrderService(
        store,
        list_limit=settings.ORDERS_LIST_LIMIT,
        cache_ttl_seconds=settings.ORDERS_CACHE_TTL_SECONDS,
        cache_max_entries=settings.ORDERS_CACHE_MAX_ENTRIES,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router, prefix="/health", tags=["Health"])
    app.include_router(orders_router, prefix="/orders", tags=["Orders"])

    @app.get("/", tags=["Info"])
    async def root():
        """API information"""
        return {
            "message": "Transport Order Dashboard API",
            "version": API_VERSION,
            "docs": "/docs",
            "health": "/health",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.exception_handler(OrderStoreError)
    async def store_exception_handler(request: Request, exc: OrderStoreError):
        logger.error(f"Store failure on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Store unavailable",
                "detail": "Orders could not be loaded",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Global exception: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "detail": "An unexpected error occurred",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "api.main:create_app",
        factory=True,
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.API_RELOAD,
        log_level=settings.LOG_LEVEL.lower(),
    )
