"""Search API controller — batch and single natural-language document search."""

from typing import Union

from fastapi import APIRouter, Depends

from docsearch.application.schemas.search import (
    BatchSearchRequest,
    BatchSearchResponse,
    ClassifiedIntentSchema,
    DocumentSchema,
    MatchResultSchema,
    QueryErrorSchema,
    SearchRequest,
)
from docsearch.application.services.batch_dispatcher import BatchDispatcher
from docsearch.domain.entities import Document, MatchResult, QueryError, SearchOutcome
from docsearch.infrastructure.dependencies import get_batch_dispatcher, require_api_key

router = APIRouter(tags=["search"], dependencies=[Depends(require_api_key)])


# ── Helpers ──────────────────────────────────────────────────────────


def _to_document_schema(document: Document) -> DocumentSchema:
    return DocumentSchema(
        id=document.id,
        content=document.content,
        metadata=document.metadata,
        similarity=document.similarity,
    )


def _to_outcome_schema(outcome: SearchOutcome) -> MatchResultSchema | QueryErrorSchema:
    """Map a domain MatchResult / QueryError to its response schema."""
    if isinstance(outcome, QueryError):
        return QueryErrorSchema(
            text=outcome.text,
            error=outcome.error,
            message=outcome.message,
        )

    result: MatchResult = outcome
    return MatchResultSchema(
        text=result.text,
        classification=ClassifiedIntentSchema(**result.classification.as_dict()),
        matches=[_to_document_schema(d) for d in result.matches],
    )


# ── Endpoints ────────────────────────────────────────────────────────


@router.post("/batch-search", response_model=BatchSearchResponse)
async def batch_search(
    body: BatchSearchRequest,
    dispatcher: BatchDispatcher = Depends(get_batch_dispatcher),
):
    """Answer every query concurrently; results are index-aligned with ``texts``."""
    outcomes = await dispatcher.run_batch(body.texts)
    return BatchSearchResponse(results=[_to_outcome_schema(o) for o in outcomes])


@router.post("/search", response_model=Union[MatchResultSchema, QueryErrorSchema])
async def search(
    body: SearchRequest,
    dispatcher: BatchDispatcher = Depends(get_batch_dispatcher),
):
    """Answer a single query."""
    outcome = await dispatcher.run_pipeline(body.text)
    return _to_outcome_schema(outcome)
