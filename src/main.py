from __future__ import annotations

from datetime import UTC, datetime

import uvicorn
from fastapi import FastAPI

from src.application.dtos.common_dto import HealthResponse, RootResponse
from src.infrastructure.api.middlewares import add_default_middlewares, add_exception_handlers
from src.infrastructure.api.routes.auth_routes import router as auth_router
from src.infrastructure.api.routes.image_routes import router as image_router
from src.infrastructure.api.routes.serving_routes import router as serving_router
from src.infrastructure.config import get_settings
from src.infrastructure.logging_config import setup_logging
from src.infrastructure.storage.local_storage import LocalBlobStore


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings)
    # Create the storage directories up front
    LocalBlobStore(settings.originals_path, settings.cache_path, settings.variant_extension)

    app = FastAPI(
        title="ImgCache Backend",
        version="0.1.0",
        description="""
        ## ImgCache Backend API

        Self-hosted image endpoint: upload originals once, then request any
        width/height. Each resized variant is generated on first request,
        cached on disk and served from the cache afterwards.

        ### Features
        - **Image Management**: Upload, list, inspect and delete images
        - **On-demand Resizing**: `/images/{id}/{width}/{height}` fits the image
          inside the box, keeps the aspect ratio and never enlarges
        - **Aggressive Caching**: originals are immutable, so every response is
          publicly cacheable for a year

        ### Authentication
        Management endpoints under `/api` require a token:
        ```
        Authorization: Bearer your-token
        ```
        or the legacy `X-API-Key: your-api-key` header. Image delivery under
        `/images` is public.

        ### Error Responses
        - **400 Bad Request**: Invalid dimensions, file type or file size
        - **401 Unauthorized**: Missing or invalid authentication token
        - **404 Not Found**: Image does not exist
        - **500 Internal Server Error**: Image could not be decoded or stored
        """,
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )
    add_default_middlewares(app, settings)
    add_exception_handlers(app)

    @app.get(
        "/",
        response_model=RootResponse,
        summary="API Root",
        description="Get basic information about the ImgCache API",
        response_description="API information including status and version",
    )
    def root():
        """Get API root information."""
        return {"status": "ok", "service": "imgcache-backend", "version": app.version}

    @app.get(
        "/health",
        response_model=HealthResponse,
        summary="Health Check",
        description="Check if the API service is running and healthy",
        response_description="Health status of the API service",
    )
    def health():
        """Check API health status."""
        return {"status": "ok", "timestamp": datetime.now(UTC)}

    app.include_router(auth_router)
    app.include_router(image_router)
    app.include_router(serving_router)
    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run("src.main:app", host=settings.host, port=settings.port)
