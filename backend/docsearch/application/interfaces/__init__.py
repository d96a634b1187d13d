from .chat_provider import ChatProvider
from .document_repository import DocumentRepository
from .embedding_provider import EmbeddingProvider

__all__ = [
    "ChatProvider",
    "DocumentRepository",
    "EmbeddingProvider",
]
