"""Pydantic schemas for search API requests and responses."""

from typing import Any, Literal

from pydantic import BaseModel, Field


# ── Request Schemas ──────────────────────────────────────────────────


class BatchSearchRequest(BaseModel):
    """Request body for a batch of natural-language queries."""

    texts: list[str] = Field(..., min_length=1, description="Queries, answered in order")


class SearchRequest(BaseModel):
    """Request body for a single natural-language query."""

    text: str = Field(..., min_length=1, description="Natural-language query")


# ── Response Schemas ─────────────────────────────────────────────────


class ClassifiedIntentSchema(BaseModel):
    """The LLM-resolved query intent; every key is always present."""

    company: str | None
    year: int | None
    employee_count_filter: str | None
    income_filter: str | None
    free_text: str | None


class DocumentSchema(BaseModel):
    """A matching document."""

    id: str
    content: str
    metadata: dict[str, Any] = {}
    similarity: float | None = None


class MatchResultSchema(BaseModel):
    """Successful result for one query."""

    status: Literal["ok"] = "ok"
    text: str
    classification: ClassifiedIntentSchema
    matches: list[DocumentSchema] = []


class QueryErrorSchema(BaseModel):
    """Failed result for one query."""

    status: Literal["error"] = "error"
    text: str
    error: str
    message: str


class BatchSearchResponse(BaseModel):
    """Per-query results, index-aligned with the request's ``texts``."""

    results: list[MatchResultSchema | QueryErrorSchema]
