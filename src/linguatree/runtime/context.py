"""Locale resolution context and shared configuration.

An I18nContext is the per-request view onto a ResourceStore: it resolves the
requested locale tag to an effective locale once, then renders keys through
the fallback chain

    full tag -> base language -> default language (opt-in) -> raw key (opt-in)

Contexts hold a reference to the store, never a copy, so loads and resets
made after a context was created are visible to it.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from linguatree.constants import DEFAULT_LANGUAGE, DEFAULT_TEMPLATE_TIMEOUT, MAX_DEPTH
from linguatree.diagnostics import (
    ErrorTemplate,
    ResourceKeyNotFoundError,
    TemplateExecutionError,
)
from linguatree.locale_utils import base_language, normalize_locale
from linguatree.runtime.helpers import bind_helpers, make_pluralize_helper
from linguatree.runtime.plural_rules import PluralEngine, get_default_engine
from linguatree.runtime.store import ResourceStore, ResourceValue
from linguatree.runtime.template import ConstantRenderer, Renderer

__all__ = ["I18nConfig", "I18nContext"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class I18nConfig:
    """Immutable configuration shared by every context of an I18n instance.

    Attributes:
        default_language: Locale used when the requested one is not loaded,
            normalized on construction.
        default_language_on_missing: Look a key up in the default language
            when the effective locale lacks it. Implies allow_missing.
        allow_missing: Render a missing key as the key itself instead of
            raising ResourceKeyNotFoundError.
        template_data: Data available to every template, beneath context and
            per-call data. Read-only after construction.
        template_timeout: Wall-clock budget per render, in seconds.
        max_expression_depth: Nesting limit for template expressions and
            loaded data.

    Example:
        >>> config = I18nConfig(default_language="en_US", default_language_on_missing=True)
        >>> config.default_language
        'en-us'
        >>> config.allow_missing
        True
    """

    default_language: str = DEFAULT_LANGUAGE
    default_language_on_missing: bool = False
    allow_missing: bool = True
    template_data: Mapping[str, Any] = field(default_factory=dict)
    template_timeout: float = DEFAULT_TEMPLATE_TIMEOUT
    max_expression_depth: int = MAX_DEPTH

    def __post_init__(self) -> None:
        """Normalize and validate values at construction time.

        Raises:
            ValueError: If default_language is empty, or template_timeout or
                max_expression_depth is not positive.
        """
        language = normalize_locale(self.default_language)
        if not language:
            msg = "default_language must not be empty"
            raise ValueError(msg)
        if self.template_timeout <= 0:
            msg = "template_timeout must be positive"
            raise ValueError(msg)
        if self.max_expression_depth <= 0:
            msg = "max_expression_depth must be positive"
            raise ValueError(msg)

        object.__setattr__(self, "default_language", language)
        if self.default_language_on_missing:
            object.__setattr__(self, "allow_missing", True)
        object.__setattr__(self, "template_data", MappingProxyType(dict(self.template_data)))

    @property
    def default_base_language(self) -> str:
        """Base language of the default locale."""
        return base_language(self.default_language)


class I18nContext:
    """Per-request locale resolution and rendering.

    Attributes:
        template_data: Context-level data, layered over the config's data
            and beneath per-call data. Mutable for the context's lifetime.

    Example:
        >>> store = ResourceStore()
        >>> store.load_resource("en", {"greeting": "Hello, ${name}"})
        >>> ctx = I18nContext(store, I18nConfig(), "en-US")
        >>> (ctx.language_code, ctx.base_language_code)
        ('en-us', 'en')
        >>> ctx.render("greeting", {"name": "Ann"})
        'Hello, Ann'
    """

    __slots__ = (
        "_base_language_code",
        "_config",
        "_engine",
        "_language_code",
        "_store",
        "template_data",
    )

    def __init__(
        self,
        store: ResourceStore,
        config: I18nConfig | None = None,
        language_code: str | None = None,
        template_data: Mapping[str, Any] | None = None,
        *,
        engine: PluralEngine | None = None,
    ) -> None:
        """Initialize context and resolve the effective locale.

        Args:
            store: Repository to read from (referenced, not copied)
            config: Shared configuration (defaults if None)
            language_code: Requested locale tag; the default language if None
            template_data: Context-level template data
            engine: Plural engine behind the ``pluralize`` helper
        """
        self._store = store
        self._config = config if config is not None else I18nConfig()
        self._engine = engine if engine is not None else get_default_engine()
        self.template_data: dict[str, Any] = dict(template_data or {})
        self._language_code = self._config.default_language
        self._base_language_code = self._config.default_base_language
        self._resolve(language_code)

    @property
    def config(self) -> I18nConfig:
        """Shared configuration."""
        return self._config

    @property
    def store(self) -> ResourceStore:
        """Repository this context reads from."""
        return self._store

    @property
    def language_code(self) -> str:
        """Effective locale tag."""
        return self._language_code

    @property
    def base_language_code(self) -> str:
        """Base language of the effective locale."""
        return self._base_language_code

    def locale(self, language_code: str | None = None) -> str:
        """Get the effective locale, or re-resolve it from a new requested tag.

        Re-resolution updates this context in place.

        Args:
            language_code: New requested tag; None only reads

        Returns:
            Effective locale tag after any re-resolution
        """
        if language_code is not None:
            self._resolve(language_code)
        return self._language_code

    def _resolve(self, language_code: str | None) -> None:
        code = normalize_locale(language_code) if language_code else ""
        if not code:
            code = self._config.default_language
        base = base_language(code)

        if not self._store.has_locale(code) and not self._store.has_locale(base):
            if code != self._config.default_language:
                logger.debug(
                    "No resources for %r or %r; using default language %r",
                    code,
                    base,
                    self._config.default_language,
                )
            code = self._config.default_language
            base = self._config.default_base_language

        self._language_code = code
        self._base_language_code = base

    def get_template(self, language_code: str | None = None, key: str = "") -> ResourceValue | None:
        """Raw value (renderer, tree or sequence) addressed by key.

        Args:
            language_code: Locale to read; the effective locale if None
            key: Dotted key; empty for the locale's whole tree
        """
        return self._store.get_template(language_code or self._language_code, key)

    def render(self, key: str, data: Mapping[str, Any] | None = None) -> str:
        """Render a key in the effective locale.

        Template data is merged from the config, then this context, then
        ``data``; later sources win. Helpers marked with @template_helper
        receive this context as first argument.

        Args:
            key: Dotted resource key
            data: Per-call template data

        Returns:
            Rendered string

        Raises:
            ResourceKeyNotFoundError: Key unresolvable and allow_missing is off
            TemplateExecutionError: The template failed or ran out of time
        """
        renderer = self._find_renderer(key)
        merged: dict[str, Any] = {
            "pluralize": make_pluralize_helper(self._engine),
            **self._config.template_data,
            **self.template_data,
            **(data or {}),
        }
        try:
            return renderer(bind_helpers(merged, self))
        except TemplateExecutionError as exc:
            if exc.key is not None:
                raise
            raise TemplateExecutionError(
                ErrorTemplate.template_execution_failed(
                    exc.source, exc.cause, self._language_code, key
                ),
                source=exc.source,
                cause=exc.cause,
                locale=self._language_code,
                key=key,
            ) from exc.__cause__

    def _find_renderer(self, key: str) -> Renderer:
        renderer = self._store.lookup(self._language_code, key)
        if renderer is not None:
            return renderer

        if self._base_language_code != self._language_code:
            renderer = self._store.lookup(self._base_language_code, key)
            if renderer is not None:
                logger.debug(
                    "Key %r resolved in base language %r", key, self._base_language_code
                )
                return renderer

        if self._config.default_language_on_missing:
            renderer = self._store.lookup(self._config.default_language, key)
            if renderer is not None:
                logger.debug(
                    "Key %r missing for %r; using default language %r",
                    key,
                    self._language_code,
                    self._config.default_language,
                )
                return renderer

        if self._config.allow_missing:
            logger.debug("Key %r missing for %r; rendering the key", key, self._language_code)
            return ConstantRenderer(key)

        raise ResourceKeyNotFoundError(
            ErrorTemplate.resource_key_not_found(self._language_code, key),
            locale=self._language_code,
            key=key,
        )

    def __repr__(self) -> str:
        return f"I18nContext(language_code={self._language_code!r})"
