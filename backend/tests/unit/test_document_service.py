"""Unit tests for the DocumentService."""

import pytest

from docsearch.application.services.document_service import DocumentService
from docsearch.domain.entities import Document
from docsearch.domain.exceptions import EntityNotFoundError


class FakeDocumentRepo:
    def __init__(self, documents: list[Document]):
        self._by_id = {d.id: d for d in documents}

    async def list_all(self):
        return list(self._by_id.values())

    async def get_by_id(self, document_id):
        return self._by_id.get(document_id)

    async def search_similar(self, query_embedding, *, threshold, limit):
        return []


@pytest.mark.asyncio
async def test_get_document_returns_document():
    doc = Document(id="d1", content="Acme 2023")
    service = DocumentService(FakeDocumentRepo([doc]))

    assert await service.get_document("d1") == doc


@pytest.mark.asyncio
async def test_get_document_unknown_id():
    service = DocumentService(FakeDocumentRepo([]))

    with pytest.raises(EntityNotFoundError) as exc_info:
        await service.get_document("missing")

    assert exc_info.value.entity_type == "Document"
    assert exc_info.value.entity_id == "missing"
