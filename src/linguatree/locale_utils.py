"""Locale tag utilities.

Centralizes locale tag normalization used throughout the codebase.
Every ingress point (load, lookup, render, plural selection) normalizes
with normalize_locale() so repository keys and cache keys stay consistent.

Python 3.13+. External dependency: Babel (CLDR locale data) for recognition.
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING

from babel.core import UnknownLocaleError

from linguatree.constants import LOCALE_SEPARATOR, MAX_LOCALE_CACHE_SIZE

if TYPE_CHECKING:
    from babel import Locale

__all__ = [
    "base_language",
    "clear_locale_cache",
    "get_babel_locale",
    "is_known_locale",
    "normalize_locale",
]


def normalize_locale(locale_code: str) -> str:
    """Normalize a locale tag: trimmed, lower-cased, hyphen-separated.

    Normalization is idempotent, so already-normalized tags pass through
    unchanged.

    Args:
        locale_code: Locale tag in any common spelling ("en_US", " EN-us ")

    Returns:
        Normalized tag (e.g., "en-us")

    Example:
        >>> normalize_locale("en_US")
        'en-us'
        >>> normalize_locale(" pt-BR ")
        'pt-br'
        >>> normalize_locale("en")
        'en'
    """
    return locale_code.strip().lower().replace("_", LOCALE_SEPARATOR)


def base_language(locale_code: str) -> str:
    """Return the language part of a locale tag (text before the first hyphen).

    Example:
        >>> base_language("pt-br")
        'pt'
        >>> base_language("zh_Hans_CN")
        'zh'
    """
    return normalize_locale(locale_code).split(LOCALE_SEPARATOR, 1)[0]


@functools.lru_cache(maxsize=MAX_LOCALE_CACHE_SIZE)
def get_babel_locale(locale_code: str) -> Locale:
    """Get a Babel Locale object with caching.

    Parses the locale code once and caches the result.

    Args:
        locale_code: Locale tag (normalized or not)

    Returns:
        Babel Locale object

    Raises:
        babel.core.UnknownLocaleError: If locale is not recognized
        ValueError: If locale format is invalid

    Example:
        >>> locale = get_babel_locale("en-us")
        >>> locale.language
        'en'
        >>> locale.territory
        'US'
    """
    # Lazy import: Babel loads CLDR data at import time; defer until needed
    from babel import Locale  # noqa: PLC0415

    return Locale.parse(normalize_locale(locale_code), sep=LOCALE_SEPARATOR)


def is_known_locale(locale_code: str) -> bool:
    """Check whether Babel's CLDR data recognizes the locale tag."""
    try:
        get_babel_locale(locale_code)
    except (UnknownLocaleError, ValueError, TypeError):
        return False
    return True


def clear_locale_cache() -> None:
    """Clear the cached Babel Locale objects."""
    get_babel_locale.cache_clear()
