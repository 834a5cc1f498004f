"""I18n facade: the entry point collaborators use.

Owns one ResourceStore, one PluralEngine and the shared I18nConfig, and
hands out I18nContext objects bound to them.

Example:
    >>> i18n = I18n(default_language="en")
    >>> i18n.load_resource("en", {"cart": "${pluralize(n, ['item', 'items'])} in cart"})
    >>> i18n.load_resource("ru", {"cart": "${pluralize(n, ['товар', 'товара', 'товаров'])}"})
    >>> i18n.render("en", "cart", {"n": 3})
    '3 items in cart'
    >>> i18n.render("ru-RU", "cart", {"n": 5})
    '5 товаров'

Python 3.13+.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from linguatree.constants import DEFAULT_EXTENSIONS
from linguatree.loading import DirectoryResourceLoader, LoadSummary
from linguatree.runtime.context import I18nConfig, I18nContext
from linguatree.runtime.plural_rules import PluralEngine, pluralize
from linguatree.runtime.store import ResourceStore
from linguatree.runtime.template import TemplateCompiler

__all__ = ["I18n"]


class I18n:
    """Localization front end: load locale data, create contexts, render keys.

    Args:
        config: Complete configuration; built from ``overrides`` if None
        directory: Directory of locale files to load on construction
        **overrides: I18nConfig fields, applied on top of ``config``

    Example:
        >>> i18n = I18n(default_language_on_missing=True)
        >>> i18n.load_resource("en", {"menu": {"title": "Menu"}})
        >>> ctx = i18n.create_context("de")
        >>> ctx.render("menu.title")
        'Menu'
    """

    __slots__ = ("_config", "_engine", "_store")

    pluralize = staticmethod(pluralize)

    def __init__(
        self,
        config: I18nConfig | None = None,
        *,
        directory: str | Path | None = None,
        **overrides: Any,
    ) -> None:
        if config is None:
            config = I18nConfig(**overrides)
        elif overrides:
            config = dataclasses.replace(config, **overrides)

        self._config = config
        self._engine = PluralEngine(default_language=config.default_language)
        self._store = ResourceStore(
            TemplateCompiler(
                timeout=config.template_timeout,
                max_depth=config.max_expression_depth,
            ),
            max_depth=config.max_expression_depth,
        )

        if directory is not None:
            self.load_locales(directory)

    @property
    def config(self) -> I18nConfig:
        """Shared configuration."""
        return self._config

    @property
    def store(self) -> ResourceStore:
        """Repository of compiled locale trees."""
        return self._store

    @property
    def engine(self) -> PluralEngine:
        """Plural engine used by the ``pluralize`` template helper."""
        return self._engine

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_resource(self, language_code: str, data: object) -> None:
        """Compile and merge locale data (see ResourceStore.load_resource)."""
        self._store.load_resource(language_code, data)

    def load_locales(
        self,
        directory: str | Path,
        *,
        extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
        strict: bool = True,
    ) -> LoadSummary:
        """Load every locale file in a directory.

        Args:
            directory: Directory containing ``<locale>.<ext>`` files
            extensions: File types to load
            strict: Re-raise the first failure instead of recording it

        Returns:
            LoadSummary of the files attempted

        Raises:
            FileNotFoundError: If the directory does not exist
        """
        loader = DirectoryResourceLoader(directory, extensions)
        return loader.load_into(self._store, strict=strict)

    def reset_resource(self, language_code: str | None = None) -> None:
        """Drop one locale, or all locales when none is given."""
        self._store.reset_resource(language_code)

    def available_locales(self) -> tuple[str, ...]:
        """Normalized tags of loaded locales."""
        return self._store.available_locales()

    # ------------------------------------------------------------------
    # Key coverage
    # ------------------------------------------------------------------

    def resource_keys(self, language_code: str) -> tuple[str, ...]:
        """Dotted key paths reachable in a locale."""
        return self._store.resource_keys(language_code)

    def missing_keys(self, language_code: str, reference: str | None = None) -> tuple[str, ...]:
        """Keys of reference (default language if None) missing from language_code."""
        return self._store.missing_keys(language_code, reference or self._config.default_language)

    def overspecified_keys(
        self, language_code: str, reference: str | None = None
    ) -> tuple[str, ...]:
        """Keys of language_code absent from reference (default language if None)."""
        return self._store.overspecified_keys(
            language_code, reference or self._config.default_language
        )

    def translation_progress(self, language_code: str, reference: str | None = None) -> float:
        """Share of reference keys (default language if None) present in language_code."""
        return self._store.translation_progress(
            language_code, reference or self._config.default_language
        )

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def create_context(
        self,
        language_code: str | None = None,
        template_data: Mapping[str, Any] | None = None,
    ) -> I18nContext:
        """New resolution context for a requested locale.

        Args:
            language_code: Requested tag; the default language if None
            template_data: Context-level template data
        """
        return I18nContext(
            self._store,
            self._config,
            language_code,
            template_data,
            engine=self._engine,
        )

    def render(
        self,
        language_code: str | None,
        key: str,
        data: Mapping[str, Any] | None = None,
    ) -> str:
        """Render a key for a locale without keeping a context around."""
        return self.create_context(language_code, data).render(key)

    @staticmethod
    def match(
        key: str, data: Mapping[str, Any] | None = None
    ) -> Callable[[str, I18nContext], bool]:
        """Predicate telling whether text equals key rendered in a context.

        Example:
            >>> is_help = I18n.match("commands.help")
            >>> is_help("/help", ctx)
            True
        """

        def predicate(text: str, context: I18nContext) -> bool:
            return bool(text) and text == context.render(key, data)

        return predicate

    def __repr__(self) -> str:
        return (
            f"I18n(default_language={self._config.default_language!r}, "
            f"locales={list(self._store.available_locales())!r})"
        )
