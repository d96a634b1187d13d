"""Document service — single-document lookup for the download endpoint."""

from docsearch.application.interfaces.document_repository import DocumentRepository
from docsearch.domain.entities import Document
from docsearch.domain.exceptions import EntityNotFoundError


class DocumentService:
    """Application service for document retrieval by id."""

    def __init__(self, repository: DocumentRepository):
        self._repository = repository

    async def get_document(self, document_id: str) -> Document:
        """Return the document or raise EntityNotFoundError."""
        document = await self._repository.get_by_id(document_id)
        if document is None:
            raise EntityNotFoundError("Document", document_id)
        return document
