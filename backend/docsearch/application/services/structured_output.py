"""Structured JSON output from a chat model — fence stripping, strict parsing, retry.

Model output is free-form text that is *supposed* to be a JSON object. The
helpers here strip Markdown fences, parse strictly, check the required keys
and retry once with a stricter instruction before giving up.
"""

import json
import logging
import re
import time
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from docsearch.application.interfaces.chat_provider import ChatProvider
from docsearch.application.services.call_limiter import CallLimiter
from docsearch.domain.entities import ChatMessage

logger = logging.getLogger(__name__)

T = TypeVar("T")

_FENCE_OPEN = re.compile(r"```(?:json)?[ \t]*\n?", re.IGNORECASE)

# Models without JSON mode ignore it; fences and retries still cover them.
_JSON_OBJECT_FORMAT = {"type": "json_object"}

_STRICT_RETRY_INSTRUCTION = """

IMPORTANT: Your previous answer could not be parsed.
Respond with exactly one JSON object and nothing else: no markdown fences,
no comments, no explanation. It must contain exactly these keys: {keys}.
Every value must have the type given above.
Use null for any value you cannot determine.
"""


class StructuredOutputError(ValueError):
    """Model output is not a JSON object with the required keys."""

    def __init__(self, message: str, raw_output: str):
        self.raw_output = raw_output
        super().__init__(message)


def strip_code_fences(text: str) -> str:
    """Remove Markdown code fences (```json ... ```) and surrounding whitespace."""
    cleaned = _FENCE_OPEN.sub("", text or "")
    return cleaned.replace("```", "").strip()


def parse_json_object(text: str, required_keys: Iterable[str]) -> dict[str, Any]:
    """Strictly parse fenced or bare model output into a dict with all required keys.

    Raises:
        StructuredOutputError: If the text is not a JSON object or misses keys.
    """
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise StructuredOutputError(f"Invalid JSON: {e.msg}", text) from e

    if not isinstance(data, dict):
        raise StructuredOutputError(
            f"Expected a JSON object, got {type(data).__name__}", text
        )

    missing = [k for k in required_keys if k not in data]
    if missing:
        raise StructuredOutputError(f"Missing keys: {', '.join(missing)}", text)

    return data


async def complete_json(
    chat_provider: ChatProvider,
    limiter: CallLimiter,
    *,
    model: str,
    system_prompt: str,
    user_text: str,
    required_keys: tuple[str, ...],
    feature: str,
    retries: int = 1,
    max_tokens: int | None = 500,
    coerce: Callable[[dict[str, Any]], T] | None = None,
) -> T | dict[str, Any]:
    """Ask the model for a JSON object, retrying with a stricter prompt on bad output.

    ``coerce`` converts the parsed object into its final type inside the retry
    loop; a ``ValueError`` from it counts as malformed output and is retried.

    Returns:
        The coerced value, or the parsed object (always containing
        ``required_keys``) when no ``coerce`` is given.

    Raises:
        StructuredOutputError: If every attempt produced malformed output.
        ExternalServiceError: If the provider call fails or times out.
    """
    prompt = system_prompt
    last_error: StructuredOutputError | None = None

    for attempt in range(retries + 1):
        messages = [
            ChatMessage(role="system", content=prompt),
            ChatMessage(role="user", content=user_text),
        ]
        start = time.monotonic()
        result = await limiter.run(
            lambda: chat_provider.complete(
                messages,
                model,
                temperature=0,
                max_tokens=max_tokens,
                response_format=_JSON_OBJECT_FORMAT,
            ),
            service=chat_provider.provider_name,
            operation=feature,
        )
        duration_ms = int((time.monotonic() - start) * 1000)
        logger.debug(
            "%s completion: attempt=%d tokens=%d duration_ms=%d",
            feature, attempt + 1, result.usage.total_tokens, duration_ms,
        )

        try:
            return _shape(result.content, required_keys, coerce)
        except StructuredOutputError as e:
            last_error = e
            logger.warning(
                "%s output rejected (attempt %d/%d): %s — raw=%r",
                feature, attempt + 1, retries + 1, e, _clip(result.content),
            )
            prompt = system_prompt + _STRICT_RETRY_INSTRUCTION.format(
                keys=", ".join(required_keys)
            )

    assert last_error is not None
    raise last_error


def _shape(
    content: str,
    required_keys: tuple[str, ...],
    coerce: Callable[[dict[str, Any]], T] | None,
) -> T | dict[str, Any]:
    data = parse_json_object(content, required_keys)
    if coerce is None:
        return data
    try:
        return coerce(data)
    except StructuredOutputError:
        raise
    except ValueError as e:
        raise StructuredOutputError(str(e), content) from e


def _clip(text: str, limit: int = 200) -> str:
    """Clip long text for concise logs."""
    raw = (text or "").strip()
    if len(raw) <= limit:
        return raw
    return f"{raw[:limit]}... (truncated {len(raw) - limit} chars)"
