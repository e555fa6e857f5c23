"""Leaf checks used by :class:`~fluent_validator.Validator`.

Every function here is a pure function of its arguments. They know nothing
about cells, locking or error messages; the validator decides when to call
them and how to report a failure.
"""

from __future__ import annotations

import html
import re
from collections.abc import Iterable, Sequence
from datetime import datetime
from re import Pattern as RegexPattern
from typing import Any
from urllib.parse import urlparse

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]*[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]*[a-zA-Z0-9])?)*\.[a-zA-Z]{2,}$"
)

NUMERIC_PATTERN = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*$")

WHITESPACE_PATTERN = re.compile(r"\s+")


def is_email(value: str) -> bool:
    """Check that ``value`` looks like an email address.

    Example:
        ```python
        is_email("linus@example.com")  # True
        is_email("linus@localhost")    # False
        ```
    """
    return bool(EMAIL_PATTERN.match(value))


def is_url(value: str) -> bool:
    """Check that ``value`` is an absolute URL with a scheme and a host."""
    if any(c.isspace() for c in value):
        return False
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)


def is_numeric(value: str) -> bool:
    """Check that ``value`` is a decimal or scientific-notation number.

    Surrounding whitespace and a leading sign are accepted. ``"nan"``,
    ``"inf"`` and digit separators are not.
    """
    return bool(NUMERIC_PATTERN.match(value))


def is_lowercase(value: str) -> bool:
    return value == value.lower()


def is_uppercase(value: str) -> bool:
    return value == value.upper()


def matches(pattern: str | RegexPattern, value: str) -> bool:
    """Search ``value`` for ``pattern`` (anchor the pattern to match fully)."""
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    return regex.search(value) is not None


def clean_string(value: str, escape_html: bool = True) -> str:
    """Trim, collapse whitespace runs and optionally HTML-escape a string.

    Entities already present in ``value`` are decoded before escaping, so
    cleaning a cleaned string returns it unchanged.

    Example:
        ```python
        clean_string("  Tom  &   Jerry ")  # 'Tom &amp; Jerry'
        ```
    """
    if escape_html:
        value = html.unescape(value)
    value = WHITESPACE_PATTERN.sub(" ", value).strip()
    if escape_html:
        value = html.escape(value, quote=True)
    return value


def parse_date(value: str, formats: Sequence[str] = ()) -> datetime:
    """Parse a date string into a ``datetime``.

    Each of ``formats`` is tried in order, then ISO-8601.

    Args:
        value: The string to parse
        formats: ``strptime`` formats to try first

    Returns:
        The parsed datetime

    Raises:
        ValueError: If no format matches
    """
    value = value.strip()
    for fmt in formats:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue

    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        pass

    raise ValueError(f"Could not parse datetime from '{value}'")


def is_unique(items: Iterable[Any]) -> bool:
    """Check that no two items compare equal.

    Mappings are checked on their values. Unhashable items fall back to
    pairwise comparison.
    """
    if isinstance(items, dict):
        items = items.values()
    items = list(items)

    try:
        return len(set(items)) == len(items)
    except TypeError:
        pass

    seen: list[Any] = []
    for item in items:
        if item in seen:
            return False
        seen.append(item)
    return True
