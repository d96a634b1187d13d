"""Colored pipeline logger — stage-tagged console logging for search queries.

Every line carries the stage label and, when bound with ``for_query``, a
short tag of the query it belongs to, so interleaved output of concurrent
pipelines stays readable.

Color scheme:
    Blue    — Intent classification
    Green   — Document store
    Cyan    — Extraction + structured filter
    Magenta — Vector fallback
    White   — Best-match selection
    Yellow  — Batch dispatch
    Red     — Errors
    Gray    — Details / timing
"""

import logging
import time
from contextlib import contextmanager
from typing import Any


# ── ANSI Color Codes ─────────────────────────────────────────────────

class _Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    GRAY = "\033[90m"


# ── Pipeline Stage Definitions ───────────────────────────────────────

class PipelineStage:
    """(label, color) pairs for each step of a search."""

    CLASSIFY = ("CLASSIFY", _Colors.BLUE)
    STORE = ("STORE", _Colors.GREEN)
    FILTER = ("FILTER", _Colors.CYAN)
    VECTOR = ("VECTOR", _Colors.MAGENTA)
    SELECT = ("SELECT", _Colors.WHITE)
    BATCH = ("BATCH", _Colors.YELLOW)
    ERROR = ("ERROR", _Colors.RED)


Stage = tuple[str, str]

_QUERY_TAG_LENGTH = 32


# ── PipelineLogger ───────────────────────────────────────────────────

class PipelineLogger:
    """Stage-aware wrapper around a standard ``logging.Logger``.

    Usage:
        plog = PipelineLogger("SearchPipeline")
        log = plog.for_query(text)
        with log.timed_step(PipelineStage.CLASSIFY, "Classifying query intent"):
            intent = await classifier.classify(text)
    """

    # Toggled once at startup by setup_logging().
    use_color = True

    def __init__(self, component_name: str, query_tag: str = ""):
        self._logger = logging.getLogger(component_name)
        self._component = component_name
        self._query_tag = query_tag

    def for_query(self, text: str) -> "PipelineLogger":
        """Return a logger whose lines are tagged with a short form of ``text``."""
        tag = " ".join(text.split())
        if len(tag) > _QUERY_TAG_LENGTH:
            tag = tag[: _QUERY_TAG_LENGTH - 1] + "…"
        return PipelineLogger(self._component, query_tag=tag)

    # ── formatting ──

    def _paint(self, text: str, *codes: str) -> str:
        if not self.use_color or not codes:
            return text
        return f"{''.join(codes)}{text}{_Colors.RESET}"

    def _line(self, stage: Stage, message: str, kwargs: dict[str, Any], *, bold: bool = False) -> str:
        label, color = stage
        head = self._paint(f"[{label}]", color, _Colors.BOLD) if bold else self._paint(f"[{label}]", color)
        parts = [head]
        if self._query_tag:
            parts.append(self._paint(f"«{self._query_tag}»", _Colors.DIM))
        parts.append(message)
        if kwargs:
            details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
            parts.append(self._paint(f"({details})", _Colors.GRAY))
        return " ".join(parts)

    # ── public API ──

    def step_start(self, stage: Stage, message: str, **kwargs: Any) -> None:
        self._logger.info(self._line(stage, self._paint(message, stage[1]), kwargs, bold=True))

    def step_complete(self, stage: Stage, message: str, **kwargs: Any) -> None:
        self._logger.info(self._line(stage, self._paint(f"✓ {message}", _Colors.GREEN), kwargs))

    def step_error(self, stage: Stage, message: str, error: Exception | None = None) -> None:
        text = self._paint(message, _Colors.RED)
        if error is not None:
            text += " " + self._paint(f"→ {type(error).__name__}: {error}", _Colors.DIM)
        self._logger.error(self._line((stage[0], _Colors.RED), text, {}, bold=True))

    def detail(self, message: str, **kwargs: Any) -> None:
        """Log a secondary line under the current step."""
        line = self._paint(f"   ├─ {message}", _Colors.GRAY)
        if self._query_tag:
            line = f"{self._paint(f'«{self._query_tag}»', _Colors.DIM)} {line}"
        if kwargs:
            details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
            line += " " + self._paint(f"({details})", _Colors.DIM)
        self._logger.info(line)

    @contextmanager
    def timed_step(self, stage: Stage, message: str, **kwargs: Any):
        """Log start and end of a step with its elapsed time; failures are logged and re-raised."""
        self.step_start(stage, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start
            self.step_error(stage, f"{message} failed after {elapsed:.2f}s", error=e)
            raise
        else:
            elapsed = time.perf_counter() - start
            self.step_complete(stage, f"{message} ({elapsed:.2f}s)", **kwargs)
