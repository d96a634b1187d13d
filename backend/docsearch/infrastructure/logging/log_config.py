"""Centralized logging configuration.

Levels come from Settings per logger category, so the SQL echo or the
outbound HTTP chatter can be silenced while the search pipeline keeps
logging at INFO.

Usage:
    from docsearch.infrastructure.logging.log_config import setup_logging
    setup_logging(settings)   # once, in the FastAPI lifespan
"""

import logging
import sys

from docsearch.config import Settings, get_settings
from docsearch.infrastructure.logging.colored_logger import PipelineLogger

_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s — %(message)s"

# Settings field → logger names whose level it controls.
_CATEGORY_MAP: dict[str, tuple[str, ...]] = {
    "log_level_sql": ("sqlalchemy.engine", "sqlalchemy.pool", "asyncpg"),
    "log_level_http": ("httpx", "httpcore"),
    "log_level_uvicorn": ("uvicorn", "uvicorn.access", "uvicorn.error"),
    "log_level_pipeline": (
        "SearchPipeline",
        "BatchDispatcher",
        "docsearch.application.services",
    ),
    "log_level_openrouter": ("docsearch.infrastructure.openrouter",),
}


def setup_logging(settings: Settings | None = None) -> None:
    """Apply root and per-category levels and the pipeline color mode."""
    settings = settings or get_settings()

    root = logging.getLogger()
    root.setLevel(_parse_level(settings.log_level, "log_level"))

    # uvicorn usually installs a handler; scripts and tests may not.
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        root.addHandler(handler)

    levels: dict[str, str] = {}
    for field_name, logger_names in _CATEGORY_MAP.items():
        raw_level: str = getattr(settings, field_name)
        level = _parse_level(raw_level, field_name)
        levels[field_name] = logging.getLevelName(level)
        for name in logger_names:
            logging.getLogger(name).setLevel(level)

    color = settings.log_color
    if color is None:
        color = sys.stderr.isatty()
    PipelineLogger.use_color = color

    logging.getLogger(__name__).debug(
        "Logging configured: root=%s color=%s %s",
        settings.log_level,
        color,
        " ".join(f"{k}={v}" for k, v in levels.items()),
    )


def _parse_level(raw: str, field_name: str) -> int:
    """Map a level name to its logging constant; unknown names fall back to INFO."""
    numeric = logging.getLevelName(raw.strip().upper())
    if isinstance(numeric, int):
        return numeric
    logging.getLogger(__name__).warning(
        "Unknown log level %r for %s, using INFO", raw, field_name
    )
    return logging.INFO
