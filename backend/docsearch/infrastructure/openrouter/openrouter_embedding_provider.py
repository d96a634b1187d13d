"""OpenRouter-based embedding provider — calls the /embeddings endpoint.

Default model: openai/text-embedding-ada-002 (1536 dimensions), the model the
stored document vectors were produced with. Query vectors of any other size
could not be compared against them, so a size mismatch is an error.
"""

import logging
from typing import Any

import httpx

from docsearch.application.interfaces.embedding_provider import EmbeddingProvider
from docsearch.domain.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

_SERVICE = "embedding"

# Models with a fixed output size reject the "dimensions" parameter.
_FIXED_SIZE_MODELS = ("text-embedding-ada-002",)


class OpenRouterEmbeddingProvider(EmbeddingProvider):
    """Infrastructure adapter — generates embeddings via OpenRouter /embeddings API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://openrouter.ai/api/v1",
        app_name: str = "Document Search",
        model: str = "openai/text-embedding-ada-002",
        model_dimensions: int = 1536,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ):
        self._api_key = api_key
        self._url = f"{base_url.rstrip('/')}/embeddings"
        self._app_name = app_name
        self._model = model
        self._dimensions = model_dimensions
        self._http_client = http_client
        self._timeout = timeout

    async def generate_query_embedding(self, query: str) -> list[float]:
        (embedding,) = await self.generate_embeddings([query])
        return embedding

    async def generate_embeddings(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        payload: dict[str, Any] = {"model": self._model, "input": texts}
        if not any(name in self._model for name in _FIXED_SIZE_MODELS):
            payload["dimensions"] = self._dimensions

        data = await self._post(payload)
        vectors = self._read_vectors(data, expected=len(texts))

        logger.debug(
            "Generated %d embeddings (model=%s, dims=%d)",
            len(vectors), self._model, self._dimensions,
        )
        return vectors

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "X-Title": self._app_name,
        }
        client = self._http_client or httpx.AsyncClient(timeout=self._timeout)
        try:
            response = await client.post(self._url, headers=headers, json=payload)
            if response.status_code != 200:
                error_text = response.text[:500]
                logger.error(
                    "Embedding API error %d: %s", response.status_code, error_text
                )
                raise ExternalServiceError(
                    _SERVICE,
                    f"Embedding API returned {response.status_code}: {error_text}",
                )
            return response.json()
        except httpx.HTTPError as e:
            raise ExternalServiceError(_SERVICE, f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            raise ExternalServiceError(_SERVICE, f"response is not valid JSON: {e}") from e
        finally:
            if self._http_client is None:
                await client.aclose()

    def _read_vectors(self, data: Any, *, expected: int) -> list[list[float]]:
        """Pull the vectors out of an OpenAI-style ``{"data": [...]}`` body, in input order."""
        items = data.get("data") if isinstance(data, dict) else None
        if not isinstance(items, list) or len(items) != expected:
            got = len(items) if isinstance(items, list) else 0
            raise ExternalServiceError(
                _SERVICE, f"Expected {expected} embeddings, got {got}"
            )

        try:
            ordered = sorted(items, key=lambda item: item.get("index", 0))
            vectors = [[float(x) for x in item["embedding"]] for item in ordered]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ExternalServiceError(_SERVICE, f"malformed response: {e}") from e

        for vector in vectors:
            if len(vector) != self._dimensions:
                raise ExternalServiceError(
                    _SERVICE,
                    f"{self._model} returned {len(vector)} dimensions, expected {self._dimensions}",
                )
        return vectors
