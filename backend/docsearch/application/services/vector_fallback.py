"""Vector fallback searcher — semantic similarity search when structured matching is empty."""

import asyncio
import logging

from docsearch.application.interfaces.document_repository import DocumentRepository
from docsearch.application.interfaces.embedding_provider import EmbeddingProvider
from docsearch.application.services.call_limiter import CallLimiter
from docsearch.domain.entities import Document
from docsearch.domain.exceptions import StoreQueryError

logger = logging.getLogger(__name__)

DEFAULT_MATCH_THRESHOLD = 0.4
DEFAULT_MATCH_COUNT = 5


class VectorFallbackSearcher:
    """Embeds the query and asks the store for the most similar documents."""

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        document_repo: DocumentRepository,
        limiter: CallLimiter,
        *,
        threshold: float = DEFAULT_MATCH_THRESHOLD,
        limit: int = DEFAULT_MATCH_COUNT,
        store_timeout_seconds: float | None = None,
    ):
        self._embedding_provider = embedding_provider
        self._document_repo = document_repo
        self._limiter = limiter
        self._threshold = threshold
        self._limit = limit
        self._store_timeout = store_timeout_seconds

    async def search(self, text: str) -> list[Document]:
        """Return up to ``limit`` documents by descending similarity (possibly none).

        Raises:
            ExternalServiceError: If the embedding call fails or times out.
            StoreQueryError: If the similarity search fails.
        """
        embedding = await self._limiter.run(
            lambda: self._embedding_provider.generate_query_embedding(text),
            service="embedding",
            operation="query_embedding",
        )

        try:
            documents = await asyncio.wait_for(
                self._document_repo.search_similar(
                    embedding, threshold=self._threshold, limit=self._limit
                ),
                timeout=self._store_timeout,
            )
        except StoreQueryError:
            raise
        except asyncio.TimeoutError as e:
            raise StoreQueryError(
                "vector_search", f"timed out after {self._store_timeout}s"
            ) from e
        except Exception as e:
            raise StoreQueryError("vector_search", f"{type(e).__name__}: {e}") from e

        logger.info(
            "Vector fallback: %d documents above threshold %.2f (limit %d)",
            len(documents),
            self._threshold,
            self._limit,
        )
        return documents
