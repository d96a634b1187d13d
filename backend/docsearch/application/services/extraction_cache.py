"""In-process LRU cache of extracted document fields, shared across queries.

Keyed by (document id, content hash): an edited document gets a new key, and
the entry for its previous content is evicted when the new one is stored.
"""

import logging
from collections import OrderedDict

from docsearch.domain.entities import Document, ExtractedFields

logger = logging.getLogger(__name__)


class ExtractionCache:
    """Bounded mapping ``(document_id, content_hash) -> ExtractedFields``.

    All operations are synchronous, so they are atomic with respect to the
    event loop and the cache can be shared by concurrent pipelines.
    """

    def __init__(self, max_entries: int = 4096):
        self._max_entries = max(1, max_entries)
        self._entries: OrderedDict[tuple[str, str], ExtractedFields] = OrderedDict()
        self._hash_by_id: dict[str, str] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, document: Document) -> ExtractedFields | None:
        key = (document.id, document.content_hash)
        fields = self._entries.get(key)
        if fields is None:
            self.misses += 1
            return None
        self._entries.move_to_end(key)
        self.hits += 1
        return fields

    def put(self, document: Document, fields: ExtractedFields) -> None:
        content_hash = document.content_hash
        previous_hash = self._hash_by_id.get(document.id)
        if previous_hash is not None and previous_hash != content_hash:
            self._entries.pop((document.id, previous_hash), None)
            logger.debug("Evicted stale extraction for document %s", document.id)

        key = (document.id, content_hash)
        self._entries[key] = fields
        self._entries.move_to_end(key)
        self._hash_by_id[document.id] = content_hash

        while len(self._entries) > self._max_entries:
            (old_id, old_hash), _ = self._entries.popitem(last=False)
            if self._hash_by_id.get(old_id) == old_hash:
                del self._hash_by_id[old_id]

    def clear(self) -> None:
        self._entries.clear()
        self._hash_by_id.clear()
