"""Numeric filter conditions — parse ``">=100"``-style strings and evaluate them.

Pure functions, no I/O. Comparisons against NaN or an unknown operator
evaluate to False instead of raising.
"""

import math
import operator as _op
import re
from collections.abc import Callable

from docsearch.domain.entities.search import Condition

# Two-character operators must be checked first so ">=" is never read as ">".
_OPERATOR_PREFIXES = (">=", "<=", ">", "<")

_COMPARATORS: dict[str, Callable[[float, float], bool]] = {
    ">=": _op.ge,
    "<=": _op.le,
    ">": _op.gt,
    "<": _op.lt,
}

_NON_NUMERIC = re.compile(r"[^\d.]")
_LEADING_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def parse_condition(text: str | None) -> Condition:
    """Parse a filter string into a Condition.

    >>> parse_condition(">=100")
    Condition(operator='>=', value=100.0)
    >>> parse_condition("<50,000")
    Condition(operator='<', value=50000.0)
    """
    raw = (text or "").lstrip()

    operator = next((p for p in _OPERATOR_PREFIXES if raw.startswith(p)), None)
    remainder = raw[len(operator):] if operator else raw

    # Currency symbols, separators and words are dropped; the first number
    # left (one decimal point at most) is the value.
    digits = _NON_NUMERIC.sub("", remainder)
    match = _LEADING_NUMBER.match(digits)
    value = float(match.group(0)) if match else math.nan

    return Condition(operator=operator, value=value)


def compare_condition(value: float | None, operator: str | None, target: float | None) -> bool:
    """Return ``value <operator> target``; False for NaN/None operands or unknown operators."""
    comparator = _COMPARATORS.get(operator or "")
    if comparator is None:
        return False
    if not _is_number(value) or not _is_number(target):
        return False
    return comparator(float(value), float(target))


def evaluate_condition(value: float | None, condition: Condition) -> bool:
    """Shorthand for comparing an extracted value against a parsed Condition."""
    return compare_condition(value, condition.operator, condition.value)


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)
