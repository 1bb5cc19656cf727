"""
FastAPI Application Factory.

Usage:
    # Development
    uvicorn api.app:create_app --factory --reload

    # Production
    uvicorn api.app:app --host 0.0.0.0 --port 8080
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from config.settings import get_settings
from core.errors import PhotoSourceError
from core.logging import configure_logging, get_logger
from core.middleware import RequestTracingMiddleware


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Startup configures logging and builds the PhotoService (and with it the
    process-wide recency cache) so the first swipe request does not pay for it.
    """
    settings = get_settings()

    configure_logging(
        json_logs=settings.is_production,
        log_level="DEBUG" if settings.debug else "INFO",
    )

    logger.info(
        "Starting photo engine API",
        environment=settings.environment,
        port=settings.port,
    )

    from photos.factory import get_photo_service
    service = get_photo_service()
    logger.info("Photo service ready", **service.catalog.stats())

    yield

    logger.info("Shutting down photo engine API")


async def photo_source_error_handler(request: Request, exc: PhotoSourceError) -> JSONResponse:
    """Only ratio=100 listings let provider failures get this far."""
    logger.error(
        "Photo source failure surfaced to caller",
        error=str(exc),
        error_type=exc.error_type,
        upstream_status=exc.status_code,
    )
    return JSONResponse(status_code=exc.http_status, content={"detail": exc.to_dict()})


def create_app(
    include_static_files: bool = True,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        include_static_files: If True, serve the local catalog under the URL prefix

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    app = FastAPI(
        title="Swipe Style Photo API",
        description="""
        Photo aggregation and recommendation engine behind the swipe deck.

        ## Main Endpoints

        - `GET /api/photos` - Swipe deck batch (local catalog + Pexels at a chosen ratio)
        - `POST /api/recommend` - Recommendations from liked photos
        - `POST /api/chat` - Stylist chat

        ## Health Checks

        - `/health`, `/health/detailed`, `/health/openai`, `/ready`, `/live`
        """,
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # =========================================================================
    # Middleware (order matters - first added = outermost)
    # =========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestTracingMiddleware)

    app.add_exception_handler(PhotoSourceError, photo_source_error_handler)

    # =========================================================================
    # Routes
    # =========================================================================

    from api.routes.health import router as health_router
    app.include_router(health_router, tags=["Health"])

    from api.routes.photos import router as photos_router
    app.include_router(photos_router)

    from api.routes.recommend import router as recommend_router
    app.include_router(recommend_router)

    from api.routes.chat import router as chat_router
    app.include_router(chat_router)

    # =========================================================================
    # Static Files
    # =========================================================================

    if include_static_files:
        _mount_catalog(app, settings)

    return app


def _mount_catalog(app: FastAPI, settings) -> None:
    """Serve the local catalog so PhotoRecord URLs resolve."""
    catalog_path = settings.catalog_dir
    if catalog_path.is_dir():
        app.mount(
            settings.catalog_url_prefix,
            StaticFiles(directory=str(catalog_path)),
            name="catalog-images",
        )
        logger.info(f"Mounted catalog images at {settings.catalog_url_prefix} from {catalog_path}")
    else:
        logger.warning(f"Catalog directory not found: {catalog_path}")


# Default app instance for uvicorn
# Usage: uvicorn api.app:app
app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(app, host=_settings.host, port=_settings.port)
