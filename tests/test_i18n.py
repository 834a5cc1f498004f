"""Tests for the I18n facade.

End-to-end behaviour through the public entry point: loading, rendering,
coverage defaults, predicates and directory loading on construction.

Python 3.13+.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

import linguatree
from linguatree import (
    I18n,
    I18nConfig,
    ResourceKeyNotFoundError,
    TemplateExecutionError,
    TemplateSyntaxError,
)


class TestConstruction:
    """Building the facade."""

    def test_overrides_build_config(self) -> None:
        """Keyword overrides become config fields."""
        i18n = I18n(default_language="ru", allow_missing=False)
        assert i18n.config.default_language == "ru"
        assert i18n.config.allow_missing is False

    def test_overrides_apply_on_top_of_config(self) -> None:
        """Overrides replace fields of an explicit config."""
        base = I18nConfig(default_language="de", allow_missing=False)
        i18n = I18n(base, allow_missing=True)
        assert i18n.config.default_language == "de"
        assert i18n.config.allow_missing is True

    def test_invalid_override_rejected(self) -> None:
        """Invalid overrides fail like config construction."""
        with pytest.raises(ValueError, match="must be positive"):
            I18n(template_timeout=0)

    def test_unknown_override_rejected(self) -> None:
        """Unknown options are a TypeError."""
        with pytest.raises(TypeError):
            I18n(no_such_option=True)

    def test_limits_reach_compiler(self) -> None:
        """Timeout is passed to the template compiler."""
        i18n = I18n(template_timeout=2.0)
        assert i18n.store.compiler.timeout == 2.0

    def test_engine_uses_default_language(self) -> None:
        """The plural engine falls back to the configured default."""
        i18n = I18n(default_language="ru")
        assert i18n.engine.select_form(5, ["a", "b", "c"], "xx") == "5 c"

    def test_repr(self, i18n: I18n) -> None:
        """repr lists the default and loaded locales."""
        assert repr(i18n) == "I18n(default_language='en', locales=['en', 'ru'])"

    def test_version_exported(self) -> None:
        """Package exposes a version string."""
        assert isinstance(linguatree.__version__, str)


class TestScenarios:
    """Canonical end-to-end cases."""

    def test_greeting(self) -> None:
        """Load and render with data."""
        i18n = I18n()
        i18n.load_resource("en", {"greeting": "Hello, ${name}"})
        assert i18n.render("en", "greeting", {"name": "Ann"}) == "Hello, Ann"

    def test_region_uses_base_resources(self) -> None:
        """Only en loaded: en-us renders from en."""
        i18n = I18n()
        i18n.load_resource("en", {"greeting": "Hello"})
        ctx = i18n.create_context("en-us")
        assert ctx.base_language_code == "en"
        assert ctx.render("greeting") == "Hello"

    def test_missing_key_returns_key(self, i18n: I18n) -> None:
        """allow_missing renders the raw key."""
        assert i18n.render("en", "does.not.exist") == "does.not.exist"

    def test_missing_key_raises_when_strict(self) -> None:
        """Strict instances raise."""
        i18n = I18n(allow_missing=False)
        i18n.load_resource("en", {"a": "x"})
        with pytest.raises(ResourceKeyNotFoundError):
            i18n.render("en", "b")

    def test_static_pluralize(self) -> None:
        """Module function through the facade."""
        assert I18n.pluralize(1, ["apple", "apples"], "en") == "1 apple"
        assert I18n.pluralize(5, ["apple", "apples"], "en") == "5 apples"

    def test_throwing_template_raises(self) -> None:
        """A failing expression never yields a string."""
        i18n = I18n()
        i18n.load_resource("en", {"boom": "${items[3]}"})
        with pytest.raises(TemplateExecutionError) as exc_info:
            i18n.render("en", "boom", {"items": []})
        assert exc_info.value.key == "boom"
        assert exc_info.value.cause is not None
        assert exc_info.value.cause.startswith("IndexError")

    def test_runaway_template_times_out(self) -> None:
        """The deadline stops long evaluations."""
        i18n = I18n(template_timeout=0.05)
        i18n.load_resource(
            "en",
            {
                "slow": "${(lambda f: f(f, 22))"
                "(lambda g, n: 0 if n == 0 else g(g, n - 1) + g(g, n - 1))}"
            },
        )
        with pytest.raises(TemplateExecutionError) as exc_info:
            i18n.render("en", "slow")
        assert exc_info.value.cause is not None
        assert exc_info.value.cause.startswith("SandboxTimeoutError")

    def test_syntax_error_at_load(self) -> None:
        """Broken templates fail the load, not the render."""
        i18n = I18n()
        with pytest.raises(TemplateSyntaxError):
            i18n.load_resource("en", {"bad": "${1 +}"})
        assert i18n.available_locales() == ()

    def test_pluralize_in_template(self, i18n: I18n) -> None:
        """Templates call pluralize with the effective locale."""
        assert i18n.render("en", "menu.cart", {"count": 2}) == "2 items in cart"
        assert i18n.render("ru", "menu.cart", {"count": 3}) == "3 товара"

    def test_render_data_is_context_data(self, i18n: I18n) -> None:
        """render() data reaches the template."""
        assert i18n.render("ru", "greeting", {"name": "Иван"}) == "Привет, Иван"

    def test_render_without_language(self, i18n: I18n) -> None:
        """None renders in the default language."""
        assert i18n.render(None, "menu.title") == "Menu"

    def test_shared_template_data(self) -> None:
        """Config data is visible to every render."""
        i18n = I18n(template_data={"brand": "Acme"})
        i18n.load_resource("en", {"t": "Welcome to ${brand}"})
        assert i18n.render("en", "t") == "Welcome to Acme"
        assert i18n.render("en", "t", {"brand": "Other"}) == "Welcome to Other"


class TestResourceManagement:
    """Load, reset and coverage through the facade."""

    def test_available_locales(self, i18n: I18n) -> None:
        """Loaded tags in load order."""
        assert i18n.available_locales() == ("en", "ru")

    def test_reset_one(self, i18n: I18n) -> None:
        """Reset drops a locale."""
        i18n.reset_resource("ru")
        assert i18n.available_locales() == ("en",)
        assert i18n.create_context("ru").language_code == "en"

    def test_reset_all(self, i18n: I18n) -> None:
        """Reset without tag drops everything."""
        i18n.reset_resource()
        assert i18n.available_locales() == ()

    def test_coverage_defaults_to_default_language(self, i18n: I18n) -> None:
        """Reference defaults to the configured default language."""
        assert i18n.missing_keys("ru") == ("menu.title", "steps")
        assert i18n.overspecified_keys("ru") == ()
        assert i18n.translation_progress("ru") == pytest.approx(2 / 4)

    def test_coverage_explicit_reference(self, i18n: I18n) -> None:
        """An explicit reference is honoured."""
        assert i18n.missing_keys("en", "ru") == ()
        assert i18n.overspecified_keys("en", "ru") == ("menu.title", "steps")

    def test_resource_keys(self, i18n: I18n) -> None:
        """Depth-first dotted keys."""
        assert i18n.resource_keys("en") == ("greeting", "menu.title", "menu.cart", "steps")


class TestMatch:
    """I18n.match predicates."""

    def test_matches_rendering_in_context(self, i18n: I18n) -> None:
        """Text equal to the rendered key matches."""
        is_title = I18n.match("menu.title")
        assert is_title("Menu", i18n.create_context("en"))
        assert not is_title("Меню", i18n.create_context("en"))

    def test_uses_context_locale(self, i18n: I18n) -> None:
        """Rendering follows the context's locale."""
        is_greeting = I18n.match("greeting", {"name": "Ann"})
        assert is_greeting("Привет, Ann", i18n.create_context("ru"))
        assert not is_greeting("Hello, Ann", i18n.create_context("ru"))

    def test_empty_text_never_matches(self) -> None:
        """Empty text is rejected even for an empty rendering."""
        i18n = I18n()
        i18n.load_resource("en", {"blank": ""})
        assert not I18n.match("blank")("", i18n.create_context())


class TestDirectoryConstruction:
    """Loading a directory on construction."""

    def test_directory_loaded(self, tmp_path: Path) -> None:
        """directory= loads every locale file."""
        (tmp_path / "en.json").write_text(json.dumps({"hi": "Hi"}), encoding="utf-8")
        (tmp_path / "de.yaml").write_text("hi: Hallo\n", encoding="utf-8")
        i18n = I18n(directory=tmp_path)
        assert set(i18n.available_locales()) == {"de", "en"}
        assert i18n.render("de", "hi") == "Hallo"

    def test_missing_directory(self, tmp_path: Path) -> None:
        """A missing directory is reported."""
        with pytest.raises(FileNotFoundError, match="not found"):
            I18n(directory=tmp_path / "missing")

    def test_load_locales_summary(self, tmp_path: Path) -> None:
        """load_locales returns the summary."""
        (tmp_path / "en.json").write_text("{}", encoding="utf-8")
        summary = I18n().load_locales(tmp_path)
        assert summary.successful == 1
        assert summary.locales == ("en",)
