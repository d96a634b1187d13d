from .base import Base
from .session import create_engine_from_settings, create_session_factory
from .models import DocumentModel

__all__ = [
    "Base",
    "create_engine_from_settings",
    "create_session_factory",
    "DocumentModel",
]
