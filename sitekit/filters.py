"""Template filters for sitekit.

Key functions:
    limit: First n items of a sequence.
    content_hash: Short MD5 digest for cache busting (installed as ``hash``).
    format_date: Long, locale-aware date (installed as ``date``).
    slugify: Lowercase, hyphenated slug.
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

from babel import Locale
from babel.dates import format_date as babel_format_date

DEFAULT_DATE_LOCALE = "de-DE"

_WHITESPACE_RE = re.compile(r"\s+")
_NON_SLUG_RE = re.compile(r"[^\w-]+", re.ASCII)


def limit(items, count: int) -> list:
    """Return the first ``count`` items, with slice semantics.

    Examples:
        >>> limit([1, 2, 3], 2)
        [1, 2]
    """
    return list(items)[:count]


def content_hash(content: Any) -> str:
    """Return the first 8 hex characters of the MD5 of ``str(content)``.

    Examples:
        >>> content_hash("abc")
        '90015098'
    """
    return hashlib.md5(str(content).encode("utf-8")).hexdigest()[:8]


def format_date(value: Any, locale: str = DEFAULT_DATE_LOCALE) -> str:
    """Format a date in the locale's long form.

    Args:
        value: A date, datetime, or ISO-8601 string.
        locale: BCP 47 tag such as ``de-DE`` or ``en-US``.

    Returns:
        Localized date, e.g. ``5. März 2024`` for de-DE.
    """
    return babel_format_date(
        _coerce_date(value), format="long", locale=Locale.parse(locale, sep="-")
    )


def _coerce_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text).date()


def slugify(text: Any) -> str:
    """Lowercase, replace whitespace runs with ``-`` and drop other symbols.

    Only ASCII word characters and hyphens survive.

    Examples:
        >>> slugify("Hello World!")
        'hello-world'
    """
    lowered = str(text).lower()
    return _NON_SLUG_RE.sub("", _WHITESPACE_RE.sub("-", lowered))


def default_filters() -> dict[str, Callable[..., Any]]:
    """Return the filter table installed into the Jinja environment."""
    return {
        "limit": limit,
        "hash": content_hash,
        "date": format_date,
        "slugify": slugify,
    }
