"""Filter evaluator — deterministic structured matching of documents against an intent.

A document matches when every predicate whose intent field is set passes
(logical AND). A predicate is skipped when the intent leaves the field unset
or when the document's extracted value for it is null. An extracted number
that could not be read is NaN, not null, so its predicate fails.
"""

import logging

from docsearch.application.services.document_extractor import DocumentExtractor
from docsearch.domain.conditions import evaluate_condition, parse_condition
from docsearch.domain.entities import ClassifiedIntent, Document, ExtractedFields

logger = logging.getLogger(__name__)


class FilterEvaluator:
    """Extracts each candidate document and keeps the structured matches."""

    def __init__(self, extractor: DocumentExtractor):
        self._extractor = extractor

    async def filter(
        self,
        intent: ClassifiedIntent,
        documents: list[Document],
    ) -> list[Document]:
        """Return the structured matches, in the original listing order.

        Extraction runs once per document, sequentially; the first failure
        propagates and aborts the filter.
        """
        if not intent.has_structured_filters:
            logger.info(
                "Intent has no structured filters — all %d documents match vacuously",
                len(documents),
            )
            return list(documents)

        matched: list[Document] = []
        for document in documents:
            fields = await self._extractor.extract(document)
            if self.matches(intent, fields):
                matched.append(document)

        logger.info(
            "Structured filter: %d/%d documents matched", len(matched), len(documents)
        )
        return matched

    @staticmethod
    def matches(intent: ClassifiedIntent, fields: ExtractedFields) -> bool:
        if intent.company and fields.company:
            if intent.company.lower() not in fields.company.lower():
                return False

        if intent.year is not None and fields.year is not None:
            if fields.year != intent.year:
                return False

        if intent.employee_count_filter and fields.number_of_employees is not None:
            condition = parse_condition(intent.employee_count_filter)
            if not evaluate_condition(fields.number_of_employees, condition):
                return False

        if intent.income_filter and fields.income is not None:
            condition = parse_condition(intent.income_filter)
            if not evaluate_condition(fields.income, condition):
                return False

        return True
