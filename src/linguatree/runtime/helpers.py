"""Context-aware template helpers.

A callable placed in template data can ask to receive the rendering context
as its first argument by being decorated with @template_helper. When a
context renders a key, every such entry is bound to that context; undecorated
callables pass through unchanged.

Marking uses a function attribute rather than identity checks, so helpers
can be defined anywhere without importing the context module.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from linguatree.runtime.plural_rules import Count, Form, PluralEngine

if TYPE_CHECKING:
    from linguatree.runtime.context import I18nContext

__all__ = [
    "BoundHelper",
    "bind_helpers",
    "is_context_helper",
    "make_pluralize_helper",
    "template_helper",
]

_CONTEXT_HELPER_ATTR: str = "_linguatree_context_helper"


def template_helper[F: Callable[..., Any]](func: F) -> F:
    """Mark a callable as needing the rendering context as first argument.

    Example:
        >>> @template_helper
        ... def greet(ctx, name):
        ...     return f"[{ctx.language_code}] {name}"
    """
    setattr(func, _CONTEXT_HELPER_ATTR, True)
    return func


def is_context_helper(value: object) -> bool:
    """Check whether value was marked with @template_helper."""
    return callable(value) and getattr(value, _CONTEXT_HELPER_ATTR, False) is True


class BoundHelper:
    """A context helper with its rendering context filled in.

    Both the helper and the context live in private slots, which template
    expressions cannot read.
    """

    __slots__ = ("_context", "_helper")

    def __init__(self, helper: Callable[..., Any], context: I18nContext) -> None:
        self._helper = helper
        self._context = context

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self._helper(self._context, *args, **kwargs)

    def __repr__(self) -> str:
        name = getattr(self._helper, "__name__", type(self._helper).__name__)
        return f"<template helper {name}>"


def bind_helpers(data: Mapping[str, Any], context: I18nContext) -> dict[str, Any]:
    """Return a copy of data with every context helper bound to context."""
    return {
        name: BoundHelper(value, context) if is_context_helper(value) else value
        for name, value in data.items()
    }


def make_pluralize_helper(engine: PluralEngine) -> Callable[..., str]:
    """Build the default ``pluralize`` template helper for an engine.

    Inside a template, ``pluralize(n, forms)`` uses the context's effective
    locale; an explicit language tag may still be passed as third argument.
    """

    @template_helper
    def pluralize(
        context: I18nContext,
        count: Count,
        forms: Sequence[Form],
        language_code: str | None = None,
    ) -> str:
        return engine.select_form(count, forms, language_code or context.language_code)

    return pluralize
