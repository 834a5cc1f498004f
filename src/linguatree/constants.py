"""Shared constants for linguatree.

Centralized configuration constants used across the runtime packages.
Placing constants here avoids circular imports and provides a single
source of truth.

Constants are grouped by domain:
- Locale defaults: Default language and key addressing
- Sandbox limits: Execution budget for compiled templates
- Cache limits: Memory bounds for caching subsystems

Python 3.13+. Zero external dependencies.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Locale defaults
    "DEFAULT_LANGUAGE",
    "KEY_SEPARATOR",
    "LOCALE_SEPARATOR",
    # Template markers
    "EXPRESSION_OPEN",
    "EXPRESSION_CLOSE",
    # Sandbox limits
    "DEFAULT_TEMPLATE_TIMEOUT",
    "MAX_DEPTH",
    "MAX_INT_BITS",
    "MAX_POWER_EXPONENT",
    "MAX_SEQUENCE_LENGTH",
    # Cache limits
    "MAX_LOCALE_CACHE_SIZE",
    # Loader defaults
    "DEFAULT_EXTENSIONS",
]

# ============================================================================
# LOCALE DEFAULTS
# ============================================================================

# Reference language used when nothing better is configured. Also the plural
# rule family used for languages missing from the plural table.
DEFAULT_LANGUAGE: str = "en"

# Separates nested tree levels in resource keys ("menu.cart.title").
KEY_SEPARATOR: str = "."

# Separates language from region/script in normalized tags ("pt-br").
LOCALE_SEPARATOR: str = "-"

# ============================================================================
# TEMPLATE MARKERS
# ============================================================================

EXPRESSION_OPEN: str = "${"
EXPRESSION_CLOSE: str = "}"

# ============================================================================
# SANDBOX LIMITS
# ============================================================================

# Wall-clock budget for a single render, in seconds (500 ms).
DEFAULT_TEMPLATE_TIMEOUT: float = 0.5

# Maximum nesting depth for expression evaluation and resource compilation.
# 100 levels is almost certainly adversarial or malformed input.
MAX_DEPTH: int = 100

# Largest exponent accepted by the ** operator inside templates.
MAX_POWER_EXPONENT: int = 1000

# Largest str/list/tuple a template may build via repetition (seq * n).
MAX_SEQUENCE_LENGTH: int = 100_000

# Largest integer, in bits, a template may build with * or **.
MAX_INT_BITS: int = 16_384

# ============================================================================
# CACHE LIMITS
# ============================================================================

# Maximum cached Babel Locale instances.
MAX_LOCALE_CACHE_SIZE: int = 128

# ============================================================================
# LOADER DEFAULTS
# ============================================================================

DEFAULT_EXTENSIONS: tuple[str, ...] = (".json", ".yaml", ".yml")
