"""Download API controller — serves a stored document's content as a text file."""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse

from docsearch.application.services.document_service import DocumentService
from docsearch.domain.exceptions import EntityNotFoundError, StoreQueryError
from docsearch.infrastructure.dependencies import get_document_service, require_api_key

router = APIRouter(prefix="/download", tags=["documents"], dependencies=[Depends(require_api_key)])


@router.get("/{document_id}", response_class=PlainTextResponse)
async def download_document(
    document_id: str,
    service: DocumentService = Depends(get_document_service),
):
    """Return the document content as an attachment named ``document-<id>.txt``."""
    try:
        document = await service.get_document(document_id)
    except EntityNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    except StoreQueryError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return PlainTextResponse(
        content=document.content,
        headers={"Content-Disposition": f"attachment; filename=document-{document.id}.txt"},
    )
