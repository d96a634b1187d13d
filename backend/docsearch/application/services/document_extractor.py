"""Document extractor — pulls comparable fields out of one document's text via the LLM."""

import logging

from docsearch.application.interfaces.chat_provider import ChatProvider
from docsearch.application.services.call_limiter import CallLimiter
from docsearch.application.services.extraction_cache import ExtractionCache
from docsearch.application.services.field_normalization import (
    normalize_number,
    normalize_text,
    normalize_year,
)
from docsearch.application.services.structured_output import (
    StructuredOutputError,
    complete_json,
)
from docsearch.domain.entities import Document, ExtractedFields
from docsearch.domain.exceptions import ExtractionParseError

logger = logging.getLogger(__name__)

EXTRACTION_KEYS = ("company", "year", "number_of_employees", "income")

_EXTRACTION_SYSTEM_PROMPT = """\
You are an intelligent document reader.

Extract the following fields from the document text:

{
  "company": (string | null),
  "year": (number | null),
  "number_of_employees": (number | null),
  "income": (number | null)
}

Rules:
- If a field is not found, return null.
- Return only valid JSON.
- No explanations.
- Numbers must be numeric (no "$" or commas).
"""


class DocumentExtractor:
    """Application service that turns a document into ExtractedFields.

    Results are cached per (document id, content hash) when a cache is given,
    so each document is sent to the model once rather than once per query.
    """

    def __init__(
        self,
        chat_provider: ChatProvider,
        limiter: CallLimiter,
        *,
        model: str,
        cache: ExtractionCache | None = None,
        retries: int = 1,
    ):
        self._chat_provider = chat_provider
        self._limiter = limiter
        self._model = model
        self._cache = cache
        self._retries = retries

    async def extract(self, document: Document) -> ExtractedFields:
        """Extract structured fields from a document.

        Raises:
            ExtractionParseError: If the model output is not well-shaped JSON
                or a field has an impossible type, after the retries.
            ExternalServiceError: If the model call fails or times out.
        """
        if self._cache is not None:
            cached = self._cache.get(document)
            if cached is not None:
                logger.debug("Extraction cache hit for document %s", document.id)
                return cached

        try:
            fields = await complete_json(
                self._chat_provider,
                self._limiter,
                model=self._model,
                system_prompt=_EXTRACTION_SYSTEM_PROMPT,
                user_text=document.content,
                required_keys=EXTRACTION_KEYS,
                feature="document_extraction",
                retries=self._retries,
                coerce=_to_fields,
            )
        except StructuredOutputError as e:
            raise ExtractionParseError(
                f"Could not parse extraction for document {document.id}: {e}",
                raw_output=e.raw_output,
                document_id=document.id,
            ) from e

        logger.debug("Extracted document %s: %s", document.id, fields.as_dict())

        if self._cache is not None:
            self._cache.put(document, fields)
        return fields


def _to_fields(data: dict) -> ExtractedFields:
    """Coerce parsed model output; raises ValueError on an impossible field type."""
    return ExtractedFields(
        company=normalize_text("company", data["company"]),
        year=normalize_year("year", data["year"]),
        number_of_employees=normalize_number(
            "number_of_employees", data["number_of_employees"]
        ),
        income=normalize_number("income", data["income"]),
    )
