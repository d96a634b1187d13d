"""Unit tests for the BatchDispatcher — per-query isolation and ordering."""

import asyncio

import pytest

from docsearch.application.services.batch_dispatcher import BatchDispatcher
from docsearch.domain.entities import ClassifiedIntent, Document, MatchResult, QueryError
from docsearch.domain.exceptions import ClassificationParseError, ExternalServiceError


# ── Fakes ────────────────────────────────────────────────────────────


class FakePipeline:
    """Simulates a pipeline whose behaviour depends on the query text."""

    def __init__(self, started: list[str] | None = None):
        self._started = started if started is not None else []

    async def run(self, text: str) -> MatchResult:
        self._started.append(text)
        if text.startswith("slow"):
            await asyncio.sleep(0.05)
        if text == "bad json":
            raise ClassificationParseError("Could not parse intent classification")
        if text == "timeout":
            raise ExternalServiceError("openrouter", "intent_classification timed out after 60.0s")
        if text == "hang":
            await asyncio.sleep(60)
        return MatchResult(
            text=text,
            classification=ClassifiedIntent(free_text=text),
            matches=[Document(id=f"doc-{text}", content=text)],
        )


# ── Tests ──


@pytest.mark.asyncio
async def test_results_are_aligned_with_input_order():
    dispatcher = BatchDispatcher(FakePipeline)
    texts = ["slow first", "second", "slow third", "fourth"]

    results = await dispatcher.run_batch(texts)

    assert [r.text for r in results] == texts
    assert all(isinstance(r, MatchResult) for r in results)


@pytest.mark.asyncio
async def test_failures_are_isolated_per_query():
    dispatcher = BatchDispatcher(FakePipeline)

    results = await dispatcher.run_batch(["ok one", "bad json", "timeout", "ok two"])

    assert isinstance(results[0], MatchResult)
    assert results[1] == QueryError(
        text="bad json",
        error="ClassificationParseError",
        message="Could not parse intent classification",
    )
    assert isinstance(results[2], QueryError)
    assert results[2].error == "ExternalServiceError"
    assert "timed out" in results[2].message
    assert isinstance(results[3], MatchResult)
    assert results[3].matches[0].id == "doc-ok two"


@pytest.mark.asyncio
async def test_empty_batch_returns_empty_list():
    assert await BatchDispatcher(FakePipeline).run_batch([]) == []


@pytest.mark.asyncio
async def test_each_query_gets_a_fresh_pipeline():
    created = []

    def factory():
        pipeline = FakePipeline()
        created.append(pipeline)
        return pipeline

    await BatchDispatcher(factory).run_batch(["a", "b", "c"])

    assert len(created) == 3
    assert len({id(p) for p in created}) == 3


@pytest.mark.asyncio
async def test_queries_run_concurrently():
    started: list[str] = []
    dispatcher = BatchDispatcher(lambda: FakePipeline(started))

    task = asyncio.create_task(dispatcher.run_batch(["slow a", "slow b", "slow c"]))
    await asyncio.sleep(0.01)

    # all three have started before any slow query could finish
    assert sorted(started) == ["slow a", "slow b", "slow c"]
    assert len(await task) == 3


@pytest.mark.asyncio
async def test_factory_failure_becomes_query_error():
    def broken_factory():
        raise RuntimeError("container not ready")

    results = await BatchDispatcher(broken_factory).run_batch(["q"])

    assert results == [QueryError(text="q", error="RuntimeError", message="container not ready")]


@pytest.mark.asyncio
async def test_run_pipeline_single_query():
    result = await BatchDispatcher(FakePipeline).run_pipeline("timeout")
    assert isinstance(result, QueryError)


@pytest.mark.asyncio
async def test_cancelling_the_batch_cancels_in_flight_queries():
    dispatcher = BatchDispatcher(FakePipeline)

    task = asyncio.create_task(dispatcher.run_batch(["hang", "hang"]))
    await asyncio.sleep(0.01)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
