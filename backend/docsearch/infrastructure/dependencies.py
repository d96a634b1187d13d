"""FastAPI dependency injection — wires infrastructure to application layer.

Long-lived handles (HTTP client, DB engine, provider adapters, call limiter,
extraction cache) are built once in the lifespan and kept on ``app.state``.
Request-scoped services are assembled from them per request.
"""

import logging
import secrets
from dataclasses import dataclass

import httpx
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from docsearch.config import Settings, get_settings
from docsearch.application.interfaces import (
    ChatProvider,
    DocumentRepository,
    EmbeddingProvider,
)
from docsearch.application.services import (
    BatchDispatcher,
    CallLimiter,
    DocumentExtractor,
    DocumentService,
    ExtractionCache,
    FilterEvaluator,
    IntentClassifier,
    SearchPipeline,
    VectorFallbackSearcher,
)
from docsearch.infrastructure.database import (
    create_engine_from_settings,
    create_session_factory,
)
from docsearch.infrastructure.database.repositories import SQLAlchemyDocumentRepository
from docsearch.infrastructure.openrouter import OpenRouterClient, OpenRouterEmbeddingProvider

logger = logging.getLogger(__name__)

_api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


@dataclass
class ServiceContainer:
    """Process-wide service handles shared read-only by every pipeline."""

    settings: Settings
    chat_provider: ChatProvider
    embedding_provider: EmbeddingProvider
    document_repo: DocumentRepository
    limiter: CallLimiter
    extraction_cache: ExtractionCache
    http_client: httpx.AsyncClient | None = None
    engine: AsyncEngine | None = None
    session_factory: async_sessionmaker[AsyncSession] | None = None

    def build_pipeline(self) -> SearchPipeline:
        """Assemble a fresh SearchPipeline over the shared handles."""
        settings = self.settings
        classifier = IntentClassifier(
            self.chat_provider,
            self.limiter,
            model=settings.chat_model,
            retries=settings.parse_retry_attempts,
        )
        extractor = DocumentExtractor(
            self.chat_provider,
            self.limiter,
            model=settings.chat_model,
            cache=self.extraction_cache,
            retries=settings.parse_retry_attempts,
        )
        fallback = VectorFallbackSearcher(
            self.embedding_provider,
            self.document_repo,
            self.limiter,
            threshold=settings.match_threshold,
            limit=settings.match_count,
            store_timeout_seconds=settings.store_timeout_seconds,
        )
        return SearchPipeline(
            classifier,
            self.document_repo,
            FilterEvaluator(extractor),
            fallback,
            best_match_limit=settings.best_match_limit,
            store_timeout_seconds=settings.store_timeout_seconds,
        )

    async def aclose(self) -> None:
        if self.http_client is not None:
            await self.http_client.aclose()
        if self.engine is not None:
            await self.engine.dispose()


def build_container(settings: Settings | None = None) -> ServiceContainer:
    """Construct every shared handle once, at process start."""
    settings = settings or get_settings()

    if not settings.openrouter_api_key.strip():
        logger.warning(
            "OPENROUTER_API_KEY is not configured; model calls will be rejected."
        )

    http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.llm_timeout_seconds),
        limits=httpx.Limits(max_connections=max(settings.llm_max_concurrency * 2, 10)),
    )
    chat_provider = OpenRouterClient(
        api_key=settings.openrouter_api_key,
        base_url=settings.openrouter_base_url,
        app_name=settings.openrouter_app_name,
        http_client=http_client,
        timeout=settings.llm_timeout_seconds,
    )
    embedding_provider = OpenRouterEmbeddingProvider(
        api_key=settings.openrouter_api_key,
        base_url=settings.openrouter_base_url,
        app_name=settings.openrouter_app_name,
        model=settings.embedding_model,
        model_dimensions=settings.embedding_dimensions,
        http_client=http_client,
        timeout=settings.llm_timeout_seconds,
    )

    engine = create_engine_from_settings(settings)
    session_factory = create_session_factory(engine)

    return ServiceContainer(
        settings=settings,
        chat_provider=chat_provider,
        embedding_provider=embedding_provider,
        document_repo=SQLAlchemyDocumentRepository(session_factory),
        limiter=CallLimiter(
            max_concurrency=settings.llm_max_concurrency,
            timeout_seconds=settings.llm_timeout_seconds,
        ),
        extraction_cache=ExtractionCache(max_entries=settings.extraction_cache_size),
        http_client=http_client,
        engine=engine,
        session_factory=session_factory,
    )


def get_container(request: Request) -> ServiceContainer:
    """Return the container created in the application lifespan."""
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Search services are not initialized",
        )
    return container


async def require_api_key(
    api_key: str | None = Depends(_api_key_header),
    settings: Settings = Depends(get_settings),
) -> None:
    """Reject requests without a configured API key (no-op when none are configured)."""
    if not settings.api_keys:
        return
    if api_key and any(secrets.compare_digest(api_key, k) for k in settings.api_keys):
        return
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or missing API key",
    )


def get_batch_dispatcher(
    container: ServiceContainer = Depends(get_container),
) -> BatchDispatcher:
    """Provides a BatchDispatcher that builds one pipeline per query."""
    return BatchDispatcher(container.build_pipeline)


def get_document_service(
    container: ServiceContainer = Depends(get_container),
) -> DocumentService:
    """Provides a DocumentService over the shared document repository."""
    return DocumentService(container.document_repo)
