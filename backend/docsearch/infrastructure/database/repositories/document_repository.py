"""SQLAlchemy implementation of DocumentRepository — pgvector-powered similarity search."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from docsearch.application.interfaces.document_repository import DocumentRepository
from docsearch.domain.entities import Document
from docsearch.domain.exceptions import StoreQueryError
from docsearch.infrastructure.database.models import DocumentModel

logger = logging.getLogger(__name__)


class SQLAlchemyDocumentRepository(DocumentRepository):
    """Read-only document repository backed by PostgreSQL + pgvector.

    Holds a session factory rather than a session: every call opens its own
    short-lived session, so one instance can serve concurrent pipelines.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @staticmethod
    def _to_entity(model: DocumentModel, similarity: float | None = None) -> Document:
        """Map ORM model → domain entity."""
        return Document(
            id=str(model.id),
            content=model.content,
            metadata=dict(model.metadata_ or {}),
            similarity=similarity,
        )

    async def list_all(self) -> list[Document]:
        stmt = select(DocumentModel).order_by(DocumentModel.created_at, DocumentModel.id)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [self._to_entity(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Document listing failed: %s", e)
            raise StoreQueryError("list_all", str(e)) from e

    async def get_by_id(self, document_id: str) -> Document | None:
        try:
            async with self._session_factory() as session:
                model = await session.get(DocumentModel, document_id)
                return self._to_entity(model) if model else None
        except SQLAlchemyError as e:
            logger.error("Document lookup failed for %s: %s", document_id, e)
            raise StoreQueryError("get_by_id", str(e)) from e

    async def search_similar(
        self,
        query_embedding: list[float],
        *,
        threshold: float,
        limit: int,
    ) -> list[Document]:
        """Cosine-similarity search: ``1 - (embedding <=> query)`` >= threshold."""
        distance = DocumentModel.embedding.cosine_distance(query_embedding)

        stmt = (
            select(DocumentModel, (1 - distance).label("similarity"))
            .where(DocumentModel.embedding.is_not(None))
            .where(1 - distance >= threshold)
            .order_by(distance.asc(), DocumentModel.id)
            .limit(limit)
        )

        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Vector search failed: %s", e)
            raise StoreQueryError("vector_search", str(e)) from e

        return [self._to_entity(model, float(score)) for model, score in rows]
