"""Intent classifier — translates a raw query into a ClassifiedIntent via the LLM."""

import logging

from docsearch.application.interfaces.chat_provider import ChatProvider
from docsearch.application.services.call_limiter import CallLimiter
from docsearch.application.services.field_normalization import (
    normalize_filter,
    normalize_text,
    normalize_year,
)
from docsearch.application.services.structured_output import (
    StructuredOutputError,
    complete_json,
)
from docsearch.domain.entities import ClassifiedIntent
from docsearch.domain.exceptions import ClassificationParseError

logger = logging.getLogger(__name__)

INTENT_KEYS = (
    "company",
    "year",
    "employee_count_filter",
    "income_filter",
    "free_text",
)

_INTENT_SYSTEM_PROMPT = """\
You are an expert document query interpreter.

Extract fields:

{
  "company": (string | null),
  "year": (number | null),
  "employee_count_filter": (string | null),
  "income_filter": (string | null),
  "free_text": (string | null)
}

Rules:
- Return only JSON
- If missing, set null
- Numbers must be numeric
- Filters start with one of >=, <=, >, < followed by a plain number,
  e.g. "over 1 million" → ">1000000", "at most 50 employees" → "<=50"
- free_text holds whatever the query asks for beyond the other fields
"""


class IntentClassifier:
    """Application service for query intent classification (temperature 0)."""

    def __init__(
        self,
        chat_provider: ChatProvider,
        limiter: CallLimiter,
        *,
        model: str,
        retries: int = 1,
    ):
        self._chat_provider = chat_provider
        self._limiter = limiter
        self._model = model
        self._retries = retries

    async def classify(self, text: str) -> ClassifiedIntent:
        """Classify a query.

        Raises:
            ClassificationParseError: If the model output is not well-shaped JSON.
            ExternalServiceError: If the model call fails or times out.
        """
        try:
            intent = await complete_json(
                self._chat_provider,
                self._limiter,
                model=self._model,
                system_prompt=_INTENT_SYSTEM_PROMPT,
                user_text=text,
                required_keys=INTENT_KEYS,
                feature="intent_classification",
                retries=self._retries,
                coerce=_to_intent,
            )
        except StructuredOutputError as e:
            raise ClassificationParseError(
                f"Could not parse intent classification: {e}",
                raw_output=e.raw_output,
            ) from e

        logger.info("Query classified: text=%r intent=%s", text, intent.as_dict())
        return intent


def _to_intent(data: dict) -> ClassifiedIntent:
    return ClassifiedIntent(
        company=normalize_text("company", data["company"]),
        year=normalize_year("year", data["year"]),
        employee_count_filter=normalize_filter(
            "employee_count_filter", data["employee_count_filter"]
        ),
        income_filter=normalize_filter("income_filter", data["income_filter"]),
        free_text=normalize_text("free_text", data["free_text"]),
    )
