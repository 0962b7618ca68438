"""
FastAPI Application
Builds the storefront app: middleware, error handlers and routers.

Run locally with:
    uvicorn storefront.api.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..db.models import Base
from .config import APISettings, get_settings
from .dependencies import get_db_engine
from .errors import setup_error_handlers
from .middleware import RequestLoggingMiddleware
from .routers import health_router, orders_router, products_router

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare the upload directory and tables; release the pool on exit."""
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level)

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)

    engine = get_db_engine()
    Base.metadata.create_all(bind=engine)
    logger.info(f"{settings.app_name} {settings.version} ready, images in {upload_dir.resolve()}")

    yield

    engine.dispose()
    logger.info(f"{settings.app_name} stopped")


def _api_index(settings: APISettings) -> dict:
    return {
        "name": settings.app_name,
        "version": settings.version,
        "description": settings.description,
        "endpoints": {
            "health": "/health",
            "status": "/status",
            "products": products_router.prefix,
            "orders": orders_router.prefix,
            "docs": "/docs",
        },
    }


def create_app(use_lifespan: bool = True) -> FastAPI:
    """
    Create and configure the application.

    Args:
        use_lifespan: Attach the startup handler. Tests disable it and
            supply their own database through dependency overrides.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description=settings.description,
        version=settings.version,
        lifespan=lifespan if use_lifespan else None,
    )

    # Cookie auth needs credentialed CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )
    app.add_middleware(RequestLoggingMiddleware)

    setup_error_handlers(app)

    for router in (health_router, products_router, orders_router):
        app.include_router(router)

    @app.get("/", tags=["health"])
    async def root():
        return _api_index(settings)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "storefront.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )
