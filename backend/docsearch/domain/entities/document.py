"""Domain entity for stored documents — read-only to the search core."""

import hashlib
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Document:
    """A document owned by the external store.

    ``similarity`` is only set on documents returned by a vector search.
    """

    id: str
    content: str
    metadata: dict[str, Any] = field(default_factory=dict, hash=False, compare=False)
    similarity: float | None = field(default=None, compare=False)

    @property
    def content_hash(self) -> str:
        """SHA-256 of the document content, used to key extraction results."""
        return hashlib.sha256(self.content.encode("utf-8")).hexdigest()
