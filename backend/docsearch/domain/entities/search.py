"""Domain entities for hybrid document search — intents, extractions, results."""

import math
from dataclasses import asdict, dataclass, field
from typing import Any

from .document import Document


@dataclass(frozen=True)
class ClassifiedIntent:
    """Structured interpretation of a free-text query.

    Every field is present; ``None`` means the query does not constrain it.
    """

    company: str | None = None
    year: int | None = None
    employee_count_filter: str | None = None
    income_filter: str | None = None
    free_text: str | None = None

    @property
    def has_structured_filters(self) -> bool:
        """Whether any field usable for structured filtering is set."""
        return any(
            value is not None
            for value in (
                self.company,
                self.year,
                self.employee_count_filter,
                self.income_filter,
            )
        )

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ExtractedFields:
    """Comparable fields pulled from one document's text."""

    company: str | None = None
    year: int | None = None
    number_of_employees: float | None = None
    income: float | None = None

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Condition:
    """A numeric comparison parsed from a filter string like ``">=100"``."""

    operator: str | None
    value: float = math.nan


@dataclass
class MatchResult:
    """Terminal output of one pipeline run."""

    text: str
    classification: ClassifiedIntent
    matches: list[Document] = field(default_factory=list)


@dataclass
class QueryError:
    """Failure of one pipeline run, reported at the query's batch position."""

    text: str
    error: str  # exception type name, e.g. "ClassificationParseError"
    message: str


SearchOutcome = MatchResult | QueryError
