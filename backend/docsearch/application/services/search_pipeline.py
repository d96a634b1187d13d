"""Search pipeline — one query through classification, filtering and fallback.

Flow:
  1. Classify:  LLM turns the query into a ClassifiedIntent.
  2. List:      fetch every document from the store.
  3. Filter:    extract fields per document and keep the structured matches.
  4. Fallback:  only if nothing matched, run a vector similarity search.
  5. Select:    keep the first matches of the chosen branch.
"""

import asyncio
import logging

from docsearch.application.interfaces.document_repository import DocumentRepository
from docsearch.application.services.best_match import (
    DEFAULT_BEST_MATCH_LIMIT,
    select_best_matches,
)
from docsearch.application.services.filter_evaluator import FilterEvaluator
from docsearch.application.services.intent_classifier import IntentClassifier
from docsearch.application.services.vector_fallback import VectorFallbackSearcher
from docsearch.domain.entities import Document, MatchResult
from docsearch.domain.exceptions import StoreQueryError
from docsearch.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage

logger = logging.getLogger(__name__)
plog = PipelineLogger("SearchPipeline")


class SearchPipeline:
    """Runs the hybrid retrieval flow for a single query.

    Holds only references to shared, read-only collaborators; all per-query
    state lives in local variables of ``run``.
    """

    def __init__(
        self,
        classifier: IntentClassifier,
        document_repo: DocumentRepository,
        filter_evaluator: FilterEvaluator,
        fallback_searcher: VectorFallbackSearcher,
        *,
        best_match_limit: int = DEFAULT_BEST_MATCH_LIMIT,
        store_timeout_seconds: float | None = None,
    ):
        self._classifier = classifier
        self._document_repo = document_repo
        self._filter = filter_evaluator
        self._fallback = fallback_searcher
        self._best_match_limit = best_match_limit
        self._store_timeout = store_timeout_seconds

    async def run(self, text: str) -> MatchResult:
        """Execute the full pipeline for one query.

        Raises:
            DocumentSearchError: Any classification, extraction, model-service
                or store failure; it aborts this query only.
        """
        log = plog.for_query(text)

        with log.timed_step(PipelineStage.CLASSIFY, "Classifying query intent"):
            intent = await self._classifier.classify(text)

        with log.timed_step(PipelineStage.STORE, "Listing documents"):
            documents = await self._list_documents()
        log.detail("Documents listed", count=len(documents))

        with log.timed_step(PipelineStage.FILTER, "Structured filtering"):
            structured = await self._filter.filter(intent, documents)

        vector: list[Document] = []
        if not structured:
            with log.timed_step(PipelineStage.VECTOR, "Vector fallback search"):
                vector = await self._fallback.search(text)
        else:
            log.detail("Vector fallback skipped", structured_matches=len(structured))

        matches = select_best_matches(structured, vector, self._best_match_limit)
        log.step_complete(
            PipelineStage.SELECT,
            "Best matches selected",
            branch="structured" if structured else "vector",
            matches=len(matches),
        )
        return MatchResult(text=text, classification=intent, matches=matches)

    async def _list_documents(self) -> list[Document]:
        try:
            return await asyncio.wait_for(
                self._document_repo.list_all(), timeout=self._store_timeout
            )
        except StoreQueryError:
            raise
        except asyncio.TimeoutError as e:
            raise StoreQueryError(
                "list_all", f"timed out after {self._store_timeout}s"
            ) from e
        except Exception as e:
            raise StoreQueryError("list_all", f"{type(e).__name__}: {e}") from e
