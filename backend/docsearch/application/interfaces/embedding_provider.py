"""Abstract interface (port) for the external embedding service."""

from abc import ABC, abstractmethod


class EmbeddingProvider(ABC):
    """Port for turning text into vectors comparable with the stored document embeddings.

    The vectors must come from the same model that embedded the documents,
    otherwise similarity scores are meaningless.
    """

    @abstractmethod
    async def generate_query_embedding(self, query: str) -> list[float]:
        """Embed one search query.

        Raises:
            ExternalServiceError: On network failure or an error response.
        """
        ...

    @abstractmethod
    async def generate_embeddings(self, texts: list[str]) -> list[list[float]]:
        """Embed several texts in one request; output order matches ``texts``."""
        ...
