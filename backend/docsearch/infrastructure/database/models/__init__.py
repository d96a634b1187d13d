from .document_models import DocumentModel

__all__ = [
    "DocumentModel",
]
