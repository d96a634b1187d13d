"""Coercion of model-produced JSON values into the declared field types.

Each normalizer returns ``None`` for an absent value and raises ``ValueError``
for a value of an impossible type, which callers turn into a parse error.
A number written as text that cannot be read is kept as NaN: it is present,
so predicates on it are evaluated, and every comparison with NaN fails.
"""

import math
import re
from typing import Any

_NULL_STRINGS = frozenset({"", "null", "none", "n/a", "-", "unknown"})
_CURRENCY_AND_SPACE = re.compile(r"[€$£¥\s]")
_MAGNITUDE_SUFFIXES = {
    "thousand": 1e3,
    "million": 1e6,
    "billion": 1e9,
    "k": 1e3,
    "m": 1e6,
    "mm": 1e6,
    "b": 1e9,
    "bn": 1e9,
}
_SUFFIX = re.compile(r"(thousand|million|billion|mm|bn|k|m|b)$")


def _is_null(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and raw.strip().lower() in _NULL_STRINGS)


def normalize_text(field_name: str, raw: Any) -> str | None:
    """Return a stripped string, or None for null-like values."""
    if _is_null(raw):
        return None
    if isinstance(raw, (dict, list, bool)):
        raise ValueError(f"{field_name}: expected a string, got {type(raw).__name__}")
    return str(raw).strip()


def normalize_filter(field_name: str, raw: Any) -> str | None:
    """Filter expressions are kept as strings; bare numbers become ``"<n>"`` text."""
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return _format_number(raw)
    return normalize_text(field_name, raw)


def normalize_year(field_name: str, raw: Any) -> int | None:
    """Coerce 2023, 2023.0 or "2023" to an int year."""
    if _is_null(raw):
        return None
    if isinstance(raw, bool) or isinstance(raw, (dict, list)):
        raise ValueError(f"{field_name}: expected an integer, got {type(raw).__name__}")
    if isinstance(raw, float):
        if not raw.is_integer():
            raise ValueError(f"{field_name}: {raw!r} is not a whole year")
        return int(raw)
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    if re.fullmatch(r"-?\d+(?:\.0+)?", text):
        return int(float(text))
    raise ValueError(f"{field_name}: cannot parse {text!r} as a year")


def normalize_number(field_name: str, raw: Any) -> float | None:
    """Coerce a numeric value, stripping currency symbols and thousands separators.

    Handles English (1,250.50) and continental (1.250,50) grouping as well as
    magnitude suffixes ("1.5M", "200k", "2 billion"). Unparseable strings yield
    NaN rather than None.
    """
    if _is_null(raw):
        return None
    if isinstance(raw, bool) or isinstance(raw, (dict, list)):
        raise ValueError(f"{field_name}: expected a number, got {type(raw).__name__}")
    if isinstance(raw, (int, float)):
        return float(raw)

    cleaned = _CURRENCY_AND_SPACE.sub("", str(raw)).lower()
    multiplier = 1.0
    suffix = _SUFFIX.search(cleaned)
    if suffix:
        multiplier = _MAGNITUDE_SUFFIXES[suffix.group(1)]
        cleaned = cleaned[: suffix.start()]

    try:
        return _parse_numeric(cleaned) * multiplier
    except ValueError:
        return math.nan


def _parse_numeric(s: str) -> float:
    """Parse a numeric string in either English or continental format."""
    continental_pattern = r"^-?\d{1,3}(?:\.\d{3})+(?:,\d+)?$|^-?\d+,\d{1,2}$"
    english_pattern = r"^-?\d{1,3}(?:,\d{3})+(?:\.\d+)?$"

    if re.match(english_pattern, s):
        # English: 1,250.50 → 1250.50
        return float(s.replace(",", ""))

    if re.match(continental_pattern, s):
        # Continental: 1.250,50 → 1250.50
        return float(s.replace(".", "").replace(",", "."))

    if re.match(r"^-?\d+(?:\.\d+)?$", s):
        return float(s)

    raise ValueError(f"Cannot parse '{s}' as a number")


def _format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
