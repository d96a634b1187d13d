"""Abstract repository interface (port) for the read-only document store."""

from abc import ABC, abstractmethod

from docsearch.domain.entities import Document


class DocumentRepository(ABC):
    """Port for document listing, lookup and vector search.

    Implementations must be safe to share between concurrent pipelines.
    """

    @abstractmethod
    async def list_all(self) -> list[Document]:
        """Return every document in the store, in listing order."""
        ...

    @abstractmethod
    async def get_by_id(self, document_id: str) -> Document | None:
        """Retrieve a single document, or None if it does not exist."""
        ...

    @abstractmethod
    async def search_similar(
        self,
        query_embedding: list[float],
        *,
        threshold: float,
        limit: int,
    ) -> list[Document]:
        """Find documents whose similarity to the query embedding is >= threshold.

        Args:
            query_embedding: The query vector.
            threshold: Minimum cosine similarity (0.0 – 1.0).
            limit: Maximum number of results.

        Returns:
            Documents ordered by descending similarity, with ``similarity`` set.
        """
        ...
