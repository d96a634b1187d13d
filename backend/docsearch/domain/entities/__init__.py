from .chat_message import ChatMessage, TokenUsage, ChatCompletionResult
from .document import Document
from .search import (
    ClassifiedIntent,
    Condition,
    ExtractedFields,
    MatchResult,
    QueryError,
    SearchOutcome,
)

__all__ = [
    "ChatMessage",
    "TokenUsage",
    "ChatCompletionResult",
    "Document",
    "ClassifiedIntent",
    "Condition",
    "ExtractedFields",
    "MatchResult",
    "QueryError",
    "SearchOutcome",
]
