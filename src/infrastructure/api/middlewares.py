from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from src.domain.errors import ImageServiceError
from src.infrastructure.config import Settings

logger = logging.getLogger(__name__)


def add_default_middlewares(app: FastAPI, settings: Settings) -> None:
    # CORS configuration
    # In development/demo mode, allow common frontend origins
    if settings.env in ("development", "staging"):
        allowed_origins = [
            "http://localhost:3000",
            "http://localhost:3001",
            "http://localhost:5173",  # Vite default
            "http://127.0.0.1:3000",
            "http://127.0.0.1:3001",
            "http://127.0.0.1:5173",
        ]
    else:
        # Images are public assets; any origin may embed them
        allowed_origins = ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=allowed_origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )


def add_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ImageServiceError)
    async def image_service_error_handler(request: Request, exc: ImageServiceError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %r", request.method, request.url.path, exc, exc_info=exc)
            detail = exc.message
        else:
            logger.info("%s %s rejected: %s", request.method, request.url.path, exc.detail)
            detail = exc.detail
        return JSONResponse(status_code=exc.status_code, content={"detail": detail})
