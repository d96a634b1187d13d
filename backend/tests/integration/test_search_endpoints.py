"""Integration tests for the search and download endpoints.

The FastAPI app runs in-process over ASGITransport with a ServiceContainer
built from fakes, so no database or model provider is needed.
"""

import json

import pytest
from httpx import ASGITransport, AsyncClient

from docsearch.application.services import CallLimiter, ExtractionCache
from docsearch.config import Settings, get_settings
from docsearch.domain.entities import ChatCompletionResult, Document, TokenUsage
from docsearch.infrastructure.dependencies import ServiceContainer
from docsearch.main import create_app


# ── Fakes ────────────────────────────────────────────────────────────


INTENTS = {
    "companies in 2023 with income over 1000000": {
        "company": None,
        "year": 2023,
        "employee_count_filter": None,
        "income_filter": ">1000000",
        "free_text": "companies",
    },
    "solar panel suppliers": {
        "company": "Helios",
        "year": None,
        "employee_count_filter": None,
        "income_filter": None,
        "free_text": "solar panel suppliers",
    },
}

DOCS = [
    Document(id="d1", content="Initech 2022 report", metadata={"source": "upload"}),
    Document(id="d2", content="Acme 2023 report"),
    Document(id="d3", content="Globex 2023 report"),
]

EXTRACTIONS = {
    "Initech 2022 report": {"company": "Initech", "year": 2022, "number_of_employees": 50, "income": 3000000},
    "Acme 2023 report": {"company": "Acme", "year": 2023, "number_of_employees": 120, "income": 1500000},
    "Globex 2023 report": {"company": "Globex", "year": 2023, "number_of_employees": 300, "income": 2000000},
}


class FakeChatProvider:
    provider_name = "fake"

    async def complete(self, messages, model, *, temperature=None, max_tokens=None, response_format=None):
        system, user = messages[0].content, messages[-1].content
        if "query interpreter" in system:
            # unknown queries get a non-JSON answer
            content = json.dumps(INTENTS[user]) if user in INTENTS else "Sorry, I can't help."
        else:
            content = json.dumps(EXTRACTIONS[user])
        return ChatCompletionResult(model=model, content=content, finish_reason="stop", usage=TokenUsage())


class FakeEmbeddingProvider:
    async def generate_embeddings(self, texts):
        return [[0.0, 1.0, 0.0] for _ in texts]

    async def generate_query_embedding(self, query):
        return [0.0, 1.0, 0.0]


class FakeDocumentRepo:
    async def list_all(self):
        return list(DOCS)

    async def get_by_id(self, document_id):
        return next((d for d in DOCS if d.id == document_id), None)

    async def search_similar(self, query_embedding, *, threshold, limit):
        return [Document(id="d1", content=DOCS[0].content, metadata={"source": "upload"}, similarity=0.77)]


def _make_app(api_keys: list[str] | None = None):
    settings = Settings(_env_file=None, api_keys=api_keys or [])
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: settings
    # ASGITransport does not run the lifespan; install the container directly.
    app.state.container = ServiceContainer(
        settings=settings,
        chat_provider=FakeChatProvider(),
        embedding_provider=FakeEmbeddingProvider(),
        document_repo=FakeDocumentRepo(),
        limiter=CallLimiter(max_concurrency=4, timeout_seconds=5),
        extraction_cache=ExtractionCache(),
    )
    return app


def _client(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


# ── Batch search ──


@pytest.mark.asyncio
async def test_batch_search_returns_aligned_results():
    async with _client(_make_app()) as client:
        response = await client.post(
            "/api/v1/batch-search",
            json={
                "texts": [
                    "companies in 2023 with income over 1000000",
                    "gibberish that cannot be classified",
                    "solar panel suppliers",
                ]
            },
        )

    assert response.status_code == 200
    results = response.json()["results"]
    assert len(results) == 3

    structured, failed, vector = results
    assert structured["status"] == "ok"
    assert structured["classification"]["year"] == 2023
    assert structured["classification"]["income_filter"] == ">1000000"
    assert [m["id"] for m in structured["matches"]] == ["d2", "d3"]

    assert failed == {
        "status": "error",
        "text": "gibberish that cannot be classified",
        "error": "ClassificationParseError",
        "message": failed["message"],
    }
    assert "Could not parse intent classification" in failed["message"]

    assert vector["status"] == "ok"
    assert vector["matches"] == [
        {"id": "d1", "content": "Initech 2022 report", "metadata": {"source": "upload"}, "similarity": 0.77}
    ]


@pytest.mark.asyncio
async def test_batch_search_rejects_empty_batch():
    async with _client(_make_app()) as client:
        empty = await client.post("/api/v1/batch-search", json={"texts": []})
        missing = await client.post("/api/v1/batch-search", json={})

    assert empty.status_code == 422
    assert missing.status_code == 422


@pytest.mark.asyncio
async def test_services_not_initialized_returns_503():
    app = create_app()
    app.state.container = None
    async with _client(app) as client:
        response = await client.post("/api/v1/search", json={"text": "anything"})

    assert response.status_code == 503


# ── Single search ──


@pytest.mark.asyncio
async def test_single_search():
    async with _client(_make_app()) as client:
        response = await client.post(
            "/api/v1/search", json={"text": "companies in 2023 with income over 1000000"}
        )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert [m["id"] for m in data["matches"]] == ["d2", "d3"]


# ── Download ──


@pytest.mark.asyncio
async def test_download_returns_text_attachment():
    async with _client(_make_app()) as client:
        response = await client.get("/api/v1/download/d2")

    assert response.status_code == 200
    assert response.text == "Acme 2023 report"
    assert response.headers["content-type"].startswith("text/plain")
    assert response.headers["content-disposition"] == "attachment; filename=document-d2.txt"


@pytest.mark.asyncio
async def test_download_unknown_document_returns_404():
    async with _client(_make_app()) as client:
        response = await client.get("/api/v1/download/nope")

    assert response.status_code == 404


# ── API key ──


@pytest.mark.asyncio
async def test_api_key_required_when_configured():
    app = _make_app(api_keys=["secret-key"])
    async with _client(app) as client:
        missing = await client.post("/api/v1/search", json={"text": "solar panel suppliers"})
        wrong = await client.get("/api/v1/download/d2", headers={"X-API-Key": "nope"})
        ok = await client.get("/api/v1/download/d2", headers={"X-API-Key": "secret-key"})
        health = await client.get("/api/v1/health")

    assert missing.status_code == 401
    assert wrong.status_code == 401
    assert ok.status_code == 200
    assert health.status_code == 200
