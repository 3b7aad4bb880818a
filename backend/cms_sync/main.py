"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cms_sync.config import get_settings
from cms_sync.infrastructure.database import Base, engine
from cms_sync.infrastructure.dependencies import get_change_broadcaster
from cms_sync.infrastructure.logging.log_config import setup_logging
from cms_sync.presentation.api.router import router as api_router
from cms_sync.presentation.api.endpoints.channel import router as channel_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — create tables, then disconnect channel clients on shutdown."""
    settings = get_settings()
    setup_logging()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("%s %s started (%s)", settings.app_title, settings.app_version, settings.app_env)

    yield

    # Shutdown
    await get_change_broadcaster().shutdown()
    await engine.dispose()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount API routes and the notification channel
    app.include_router(api_router)
    app.include_router(channel_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cms_sync.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
