"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from docsearch.config import get_settings
from docsearch.infrastructure.database import Base
from docsearch.infrastructure.dependencies import build_container
from docsearch.infrastructure.logging.log_config import setup_logging
from docsearch.presentation.api.v1.router import router as api_router

logger = logging.getLogger(__name__)


async def _create_schema(engine: AsyncEngine) -> None:
    """Enable pgvector and create the ``documents`` table if missing.

    The search core never writes documents; this only makes a fresh database
    usable for whatever process loads the collection.
    """
    try:
        async with engine.begin() as conn:
            if engine.dialect.name == "postgresql":
                await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
            await conn.run_sync(Base.metadata.create_all)
    except Exception as exc:
        logger.warning("Could not create database schema: %s", exc)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — build shared service handles, dispose on shutdown."""
    settings = get_settings()
    setup_logging(settings)

    container = build_container(settings)
    if settings.auto_create_schema and container.engine is not None:
        await _create_schema(container.engine)

    app.state.container = container
    logger.info(
        "Search services ready (chat=%s, embeddings=%s, max_concurrency=%d)",
        settings.chat_model,
        settings.embedding_model,
        settings.llm_max_concurrency,
    )

    yield

    # Shutdown
    app.state.container = None
    await container.aclose()


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

    # Mount API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "docsearch.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
