"""Batch dispatcher — one isolated pipeline task per query, results kept in input order."""

import asyncio
import logging
import time
from collections.abc import Callable

from docsearch.application.services.search_pipeline import SearchPipeline
from docsearch.domain.entities import QueryError, SearchOutcome
from docsearch.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage

logger = logging.getLogger(__name__)
plog = PipelineLogger("BatchDispatcher")


class BatchDispatcher:
    """Runs search pipelines concurrently with per-query fault isolation.

    Each query gets a fresh SearchPipeline from ``pipeline_factory`` and runs
    in its own asyncio task. A failure is reported as a QueryError at that
    query's position and never affects sibling queries.
    """

    def __init__(self, pipeline_factory: Callable[[], SearchPipeline]):
        self._pipeline_factory = pipeline_factory

    async def run_pipeline(self, text: str) -> SearchOutcome:
        """Run one query; return its MatchResult or a QueryError."""
        try:
            pipeline = self._pipeline_factory()
            return await pipeline.run(text)
        except Exception as e:
            logger.warning(
                "Search pipeline failed for %r: %s: %s", text, type(e).__name__, e
            )
            return QueryError(text=text, error=type(e).__name__, message=str(e))

    async def run_batch(self, texts: list[str]) -> list[SearchOutcome]:
        """Run every query concurrently; the i-th result belongs to ``texts[i]``.

        Cancelling the caller cancels every query still in flight.
        """
        if not texts:
            return []

        plog.step_start(PipelineStage.BATCH, "Dispatching batch", queries=len(texts))
        start = time.perf_counter()

        # run_pipeline never raises, so gather only fails on cancellation,
        # which it forwards to every unfinished child task.
        results = await asyncio.gather(*(self.run_pipeline(text) for text in texts))

        failed = sum(1 for r in results if isinstance(r, QueryError))
        plog.step_complete(
            PipelineStage.BATCH,
            f"Batch finished in {time.perf_counter() - start:.2f}s",
            succeeded=len(results) - failed,
            failed=failed,
        )
        return list(results)
