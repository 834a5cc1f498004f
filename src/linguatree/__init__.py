"""linguatree - hierarchical locale resources with sandboxed templates.

Loads nested per-locale resource trees whose leaves are templates, resolves
a requested locale through a deterministic fallback chain, and renders keys
with data, including grammatical plural selection for many languages.

Public API:
    I18n - Facade: load locales, create contexts, render keys
    I18nConfig - Immutable shared configuration
    I18nContext - Per-request locale resolution and rendering
    ResourceStore - Repository of compiled locale trees
    TemplateCompiler - Template source to renderer
    PluralEngine - Per-language plural form selection
    pluralize - Plural selection with the shared default engine
    template_helper - Decorator for helpers that receive the rendering context

Exceptions:
    I18nError - Base exception class
    InvalidResourceShapeError - Loaded data is not a resource tree
    TemplateSyntaxError - Template cannot be compiled
    TemplateExecutionError - Template failed or timed out while rendering
    ResourceKeyNotFoundError - Key unresolvable with missing keys disallowed

Submodules:
    linguatree.loading - Directory loading of JSON/YAML locale files
    linguatree.diagnostics - Diagnostic codes, templates and formatting
    linguatree.runtime.sandbox - Restricted expression evaluator
"""

from .diagnostics import (
    I18nError,
    InvalidResourceShapeError,
    ResourceKeyNotFoundError,
    TemplateExecutionError,
    TemplateSyntaxError,
)
from .i18n import I18n
from .locale_utils import normalize_locale
from .runtime import (
    I18nConfig,
    I18nContext,
    PluralEngine,
    ResourceStore,
    TemplateCompiler,
    pluralize,
    template_helper,
)

# Version information - Auto-populated from package metadata
# SINGLE SOURCE OF TRUTH: pyproject.toml [project] version
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _get_version

try:
    __version__ = _get_version("linguatree")
except PackageNotFoundError:
    # Development mode: package not installed yet
    __version__ = "0.0.0+dev"

__all__ = [
    "I18n",
    "I18nConfig",
    "I18nContext",
    "I18nError",
    "InvalidResourceShapeError",
    "PluralEngine",
    "ResourceKeyNotFoundError",
    "ResourceStore",
    "TemplateCompiler",
    "TemplateExecutionError",
    "TemplateSyntaxError",
    "__version__",
    "normalize_locale",
    "pluralize",
    "template_helper",
]
