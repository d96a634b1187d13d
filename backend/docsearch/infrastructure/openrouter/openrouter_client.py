"""OpenRouter API client — implements the ChatProvider interface.

Talks to the OpenRouter API (https://openrouter.ai/api/v1), or any
OpenAI-compatible endpoint, over httpx. Only non-streaming completions are
needed: classification and extraction both expect one short JSON answer.
"""

import logging
from typing import Any

import httpx

from docsearch.application.interfaces.chat_provider import ChatProvider
from docsearch.domain.entities import (
    ChatMessage,
    ChatCompletionResult,
    TokenUsage,
)
from docsearch.domain.exceptions import ChatProviderError, ExternalServiceError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60.0


class OpenRouterClient(ChatProvider):
    """Infrastructure adapter — connects to the OpenRouter API.

    Pass a shared ``http_client`` to reuse one connection pool across every
    concurrent pipeline; without it a short-lived client is created per call.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://openrouter.ai/api/v1",
        app_name: str = "Document Search",
        http_client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._app_name = app_name
        self._http_client = http_client
        self._timeout = timeout

    @property
    def provider_name(self) -> str:
        return "openrouter"

    async def complete(
        self,
        messages: list[ChatMessage],
        model: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
        response_format: dict[str, Any] | None = None,
    ) -> ChatCompletionResult:
        """Send a chat completion and return the first choice."""
        payload: dict[str, Any] = {
            "model": model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
        }
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        if response_format is not None:
            payload["response_format"] = response_format

        data = await self._post_json("/chat/completions", payload)
        return self._to_result(data)

    # ── HTTP ──

    async def _post_json(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST ``payload`` and return the decoded body, mapping every failure to a domain error."""
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "X-Title": self._app_name,
        }
        client = self._http_client or httpx.AsyncClient(timeout=self._timeout)
        try:
            response = await client.post(
                f"{self._base_url}{path}", headers=headers, json=payload
            )
            if response.status_code != 200:
                raise self._status_error(response)
            data = response.json()
        except httpx.TimeoutException as e:
            raise ExternalServiceError(self.provider_name, f"request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(
                self.provider_name, f"{type(e).__name__}: {e}"
            ) from e
        except ValueError as e:
            raise ExternalServiceError(
                self.provider_name, f"response is not valid JSON: {e}"
            ) from e
        finally:
            if self._http_client is None:
                await client.aclose()

        if not isinstance(data, dict):
            raise ExternalServiceError(
                self.provider_name, f"unexpected response body: {type(data).__name__}"
            )
        return data

    def _status_error(self, response: httpx.Response) -> ChatProviderError:
        try:
            message = response.json().get("error", {}).get("message") or response.text
        except (ValueError, AttributeError):
            message = response.text

        logger.error(
            "OpenRouter returned %d: %s", response.status_code, message[:300]
        )
        return ChatProviderError(
            provider=self.provider_name,
            status_code=response.status_code,
            message=message,
        )

    # ── Parsing ──

    def _to_result(self, data: dict[str, Any]) -> ChatCompletionResult:
        # OpenRouter reports some upstream failures inside a 200 body.
        if "error" in data:
            error = data["error"] or {}
            raise ChatProviderError(
                provider=self.provider_name,
                status_code=error.get("code", 500),
                message=error.get("message", "Unknown error"),
            )

        choices = data.get("choices") or []
        if not choices:
            raise ChatProviderError(
                provider=self.provider_name,
                status_code=500,
                message="No choices in response",
            )

        choice = choices[0]
        usage = data.get("usage") or {}
        return ChatCompletionResult(
            model=data.get("model", ""),
            content=(choice.get("message") or {}).get("content") or "",
            finish_reason=choice.get("finish_reason") or "stop",
            usage=TokenUsage(
                prompt_tokens=usage.get("prompt_tokens", 0),
                completion_tokens=usage.get("completion_tokens", 0),
                total_tokens=usage.get("total_tokens", 0),
                cost=usage.get("cost"),
            ),
            provider=self.provider_name,
        )
