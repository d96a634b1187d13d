"""Abstract chat provider interface — port for AI provider adapters.

This interface enables multi-provider support. Each AI provider
(OpenRouter, OpenAI, etc.) implements this interface.
"""

from abc import ABC, abstractmethod

from docsearch.domain.entities import ChatMessage, ChatCompletionResult


class ChatProvider(ABC):
    """Port — defines what the application layer needs from any chat provider."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique name identifying this provider (e.g. 'openrouter')."""
        ...

    @abstractmethod
    async def complete(
        self,
        messages: list[ChatMessage],
        model: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
        response_format: dict | None = None,
    ) -> ChatCompletionResult:
        """Send a non-streaming chat completion request.

        Args:
            messages: The conversation history.
            model: The model identifier (e.g. 'openai/gpt-4o').
            temperature: Sampling temperature (0.0–2.0).
            max_tokens: Maximum tokens in the response.
            response_format: OpenAI-style output constraint, e.g.
                ``{"type": "json_object"}``.

        Returns:
            A ChatCompletionResult with the raw content and usage.

        Raises:
            ExternalServiceError: On network failure or an error response.
        """
        ...
