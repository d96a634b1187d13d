"""Unit tests for the DocumentExtractor and its extraction cache."""

import json
import math

import pytest

from docsearch.application.services.call_limiter import CallLimiter
from docsearch.application.services.document_extractor import DocumentExtractor
from docsearch.application.services.extraction_cache import ExtractionCache
from docsearch.domain.entities import (
    ChatCompletionResult,
    Document,
    ExtractedFields,
    TokenUsage,
)
from docsearch.domain.exceptions import ExtractionParseError


# ── Fakes ────────────────────────────────────────────────────────────


class FakeChatProvider:
    """Answers every extraction with the payload registered for the document text.

    A list of payloads is answered in order, one per call.
    """

    provider_name = "fake"

    def __init__(self, by_content: dict[str, str | list[str]]):
        self._by_content = by_content
        self.calls: list[str] = []

    async def complete(self, messages, model, *, temperature=None, max_tokens=None, response_format=None):
        content = messages[-1].content
        self.calls.append(content)
        answer = self._by_content[content]
        if isinstance(answer, list):
            answer = answer[min(self.calls.count(content), len(answer)) - 1]
        return ChatCompletionResult(
            model=model,
            content=answer,
            finish_reason="stop",
            usage=TokenUsage(),
        )


def _extraction(company=None, year=None, employees=None, income=None) -> str:
    return json.dumps(
        {
            "company": company,
            "year": year,
            "number_of_employees": employees,
            "income": income,
        }
    )


def _extractor(provider, cache=None, retries: int = 1) -> DocumentExtractor:
    return DocumentExtractor(
        provider,
        CallLimiter(max_concurrency=2, timeout_seconds=1),
        model="test-model",
        cache=cache,
        retries=retries,
    )


# ── Extraction ──


@pytest.mark.asyncio
async def test_extract_returns_typed_fields():
    doc = Document(id="d1", content="Acme Corp 2023 report")
    provider = FakeChatProvider(
        {doc.content: _extraction("Acme Corp", 2023, 120, 1500000)}
    )

    fields = await _extractor(provider).extract(doc)

    assert fields == ExtractedFields(
        company="Acme Corp", year=2023, number_of_employees=120.0, income=1_500_000.0
    )


@pytest.mark.asyncio
async def test_extract_strips_currency_from_string_numbers():
    doc = Document(id="d1", content="Globex annual report")
    provider = FakeChatProvider(
        {doc.content: _extraction("Globex", "2022", "1,200", "$2,000,000")}
    )

    fields = await _extractor(provider).extract(doc)

    assert fields.year == 2022
    assert fields.number_of_employees == 1200.0
    assert fields.income == 2_000_000.0


@pytest.mark.asyncio
async def test_extract_all_null_fields():
    doc = Document(id="d1", content="A poem about the sea")
    provider = FakeChatProvider({doc.content: _extraction()})

    fields = await _extractor(provider).extract(doc)

    assert fields == ExtractedFields()


@pytest.mark.asyncio
async def test_extract_malformed_output_raises_parse_error():
    doc = Document(id="d7", content="Garbled")
    provider = FakeChatProvider({doc.content: "company: Acme"})

    with pytest.raises(ExtractionParseError) as exc_info:
        await _extractor(provider).extract(doc)

    assert exc_info.value.document_id == "d7"
    assert exc_info.value.raw_output == "company: Acme"
    # one strict retry before giving up
    assert len(provider.calls) == 2


@pytest.mark.asyncio
async def test_extract_wrong_field_type_raises_parse_error():
    doc = Document(id="d1", content="Weird")
    provider = FakeChatProvider({doc.content: _extraction(income={"amount": 1})})

    with pytest.raises(ExtractionParseError):
        await _extractor(provider).extract(doc)
    assert len(provider.calls) == 2


@pytest.mark.asyncio
async def test_extract_retries_when_a_field_has_the_wrong_type():
    doc = Document(id="d1", content="Acme FY2023 report")
    provider = FakeChatProvider(
        {
            doc.content: [
                _extraction("Acme", "FY2023", 120, 1500000),
                _extraction("Acme", 2023, 120, 1500000),
            ]
        }
    )

    fields = await _extractor(provider).extract(doc)

    assert fields.year == 2023
    assert len(provider.calls) == 2


@pytest.mark.asyncio
async def test_extract_keeps_unreadable_number_as_nan():
    doc = Document(id="d1", content="Acme report")
    provider = FakeChatProvider({doc.content: _extraction("Acme", 2023, None, "about 2M USD")})

    fields = await _extractor(provider).extract(doc)

    assert math.isnan(fields.income)
    assert fields.number_of_employees is None
    assert len(provider.calls) == 1


# ── Caching ──


@pytest.mark.asyncio
async def test_extract_uses_cache_for_repeated_documents():
    doc = Document(id="d1", content="Acme Corp 2023 report")
    provider = FakeChatProvider({doc.content: _extraction("Acme Corp", 2023)})
    cache = ExtractionCache(max_entries=10)
    extractor = _extractor(provider, cache=cache)

    first = await extractor.extract(doc)
    second = await extractor.extract(doc)

    assert first == second
    assert len(provider.calls) == 1
    assert cache.hits == 1


@pytest.mark.asyncio
async def test_edited_document_is_extracted_again():
    original = Document(id="d1", content="Acme 2022")
    edited = Document(id="d1", content="Acme 2023")
    provider = FakeChatProvider(
        {
            original.content: _extraction("Acme", 2022),
            edited.content: _extraction("Acme", 2023),
        }
    )
    cache = ExtractionCache(max_entries=10)
    extractor = _extractor(provider, cache=cache)

    assert (await extractor.extract(original)).year == 2022
    assert (await extractor.extract(edited)).year == 2023
    assert len(provider.calls) == 2
    assert len(cache) == 1


@pytest.mark.asyncio
async def test_parse_failures_are_not_cached():
    doc = Document(id="d1", content="Garbled")
    provider = FakeChatProvider({doc.content: "???"})
    cache = ExtractionCache(max_entries=10)

    with pytest.raises(ExtractionParseError):
        await _extractor(provider, cache=cache, retries=0).extract(doc)

    assert len(cache) == 0
