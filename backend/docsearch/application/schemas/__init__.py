from .search import (
    BatchSearchRequest,
    BatchSearchResponse,
    ClassifiedIntentSchema,
    DocumentSchema,
    MatchResultSchema,
    QueryErrorSchema,
    SearchRequest,
)

__all__ = [
    "BatchSearchRequest",
    "BatchSearchResponse",
    "ClassifiedIntentSchema",
    "DocumentSchema",
    "MatchResultSchema",
    "QueryErrorSchema",
    "SearchRequest",
]
