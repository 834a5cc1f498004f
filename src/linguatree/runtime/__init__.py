"""linguatree runtime package.

Provides template compilation, the sandboxed expression evaluator, plural
selection, the resource store and locale resolution contexts.

Python 3.13+.
"""

from .context import I18nConfig, I18nContext
from .helpers import template_helper
from .plural_rules import PluralEngine, PluralRule, pluralize
from .store import ResourceStore
from .template import ConstantRenderer, Renderer, TemplateCompiler, compile_template

__all__ = [
    "ConstantRenderer",
    "I18nConfig",
    "I18nContext",
    "PluralEngine",
    "PluralRule",
    "Renderer",
    "ResourceStore",
    "TemplateCompiler",
    "compile_template",
    "pluralize",
    "template_helper",
]
