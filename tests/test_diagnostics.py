"""Tests for the diagnostics package: codes, templates, errors and formatting.

Python 3.13+.
"""

from __future__ import annotations

import json

import pytest

from linguatree.diagnostics import (
    Diagnostic,
    DiagnosticCode,
    DiagnosticFormatter,
    ErrorTemplate,
    I18nError,
    InvalidResourceShapeError,
    OutputFormat,
    ResourceKeyNotFoundError,
    TemplateExecutionError,
    TemplateSyntaxError,
)


class TestDiagnosticCodes:
    """Code numbering."""

    def test_codes_unique(self) -> None:
        """No two codes share a value."""
        values = [code.value for code in DiagnosticCode]
        assert len(values) == len(set(values))

    @pytest.mark.parametrize(
        ("prefix", "low", "high"),
        [("RESOURCE_KEY", 1000, 1999), ("TEMPLATE_", 2000, 2999)],
    )
    def test_codes_grouped_by_range(self, prefix: str, low: int, high: int) -> None:
        """Codes of a category live in the category's range."""
        for code in DiagnosticCode:
            if code.name.startswith(prefix):
                assert low <= code.value <= high


class TestErrorTemplates:
    """Messages produced by ErrorTemplate."""

    def test_resource_key_not_found(self) -> None:
        """Names the locale and key."""
        diagnostic = ErrorTemplate.resource_key_not_found("de", "menu.title")
        assert diagnostic.code == DiagnosticCode.RESOURCE_KEY_NOT_FOUND
        assert diagnostic.message == "Resource 'de.menu.title' not found"
        assert diagnostic.locale == "de"
        assert diagnostic.key == "menu.title"

    def test_long_sources_truncated(self) -> None:
        """Template sources are shortened in messages but kept whole on the diagnostic."""
        source = "x" * 200
        diagnostic = ErrorTemplate.unterminated_expression(source, 5)
        assert "..." in diagnostic.message
        assert len(diagnostic.message) < 200
        assert diagnostic.source == source

    def test_execution_failed_with_location(self) -> None:
        """Locale and key appear when both are known."""
        diagnostic = ErrorTemplate.template_execution_failed("${x}", "NameError: x", "en", "k")
        assert diagnostic.message == "Template ('en.k') failed: NameError: x"

    def test_execution_failed_without_location(self) -> None:
        """No location part when rendered outside a context."""
        diagnostic = ErrorTemplate.template_execution_failed("${x}", "NameError: x")
        assert diagnostic.message == "Template failed: NameError: x"

    def test_timeout_in_milliseconds(self) -> None:
        """Budget is reported in milliseconds."""
        assert ErrorTemplate.template_timeout(0.5).message == "Template evaluation exceeded 500 ms"

    def test_invalid_key_at_root(self) -> None:
        """Root-level keys are located as <root>."""
        diagnostic = ErrorTemplate.resource_invalid_key("en", "", "a.b")
        assert "<root>" in diagnostic.message
        assert "'a.b'" in diagnostic.message

    def test_invalid_leaf(self) -> None:
        """Leaf errors name the type and path."""
        diagnostic = ErrorTemplate.resource_invalid_leaf("en", "menu.count", "int")
        assert diagnostic.message == "Unsupported value of type int at 'menu.count' in locale 'en'"


class TestErrors:
    """Exception classes."""

    def test_plain_message(self) -> None:
        """Errors accept plain strings."""
        error = I18nError("plain")
        assert str(error) == "plain"
        assert error.diagnostic is None

    def test_diagnostic_message(self) -> None:
        """Errors built from diagnostics keep them and format them."""
        diagnostic = ErrorTemplate.resource_root_not_mapping("en", "list")
        error = InvalidResourceShapeError(diagnostic, locale="en")
        assert error.diagnostic is diagnostic
        assert str(error).startswith("error[RESOURCE_ROOT_NOT_MAPPING]")
        assert error.locale == "en"
        assert error.path == ""

    def test_key_not_found_is_key_error(self) -> None:
        """ResourceKeyNotFoundError is catchable as KeyError with a readable str."""
        error = ResourceKeyNotFoundError(
            ErrorTemplate.resource_key_not_found("en", "x"), locale="en", key="x"
        )
        assert isinstance(error, KeyError)
        assert isinstance(error, I18nError)
        assert str(error).startswith("error[RESOURCE_KEY_NOT_FOUND]: Resource 'en.x' not found")
        assert not str(error).startswith("'")

    def test_execution_error_fields(self) -> None:
        """TemplateExecutionError carries its context."""
        error = TemplateExecutionError("m", source="s", cause="c", locale="en", key="k")
        assert (error.source, error.cause, error.locale, error.key) == ("s", "c", "en", "k")

    def test_syntax_error_source(self) -> None:
        """TemplateSyntaxError carries the source."""
        assert TemplateSyntaxError("m", source="${").source == "${"


class TestDiagnosticFormatter:
    """Output styles."""

    @pytest.fixture
    def diagnostic(self) -> Diagnostic:
        return ErrorTemplate.resource_key_not_found("de", "menu.title")

    def test_rust_style(self, diagnostic: Diagnostic) -> None:
        """Default style shows location and help lines."""
        output = DiagnosticFormatter().format(diagnostic)
        assert output.splitlines() == [
            "error[RESOURCE_KEY_NOT_FOUND]: Resource 'de.menu.title' not found",
            "  --> de:menu.title",
            "  = help: Load the key for this locale, or enable allow_missing",
        ]

    def test_simple_style(self, diagnostic: Diagnostic) -> None:
        """Single line."""
        output = DiagnosticFormatter(output_format=OutputFormat.SIMPLE).format(diagnostic)
        assert output == "RESOURCE_KEY_NOT_FOUND: Resource 'de.menu.title' not found"

    def test_json_style(self, diagnostic: Diagnostic) -> None:
        """Machine-readable output."""
        output = DiagnosticFormatter(output_format=OutputFormat.JSON).format(diagnostic)
        data = json.loads(output)
        assert data["code"] == "RESOURCE_KEY_NOT_FOUND"
        assert data["code_value"] == 1001
        assert data["locale"] == "de"
        assert data["key"] == "menu.title"

    def test_sanitize_truncates(self) -> None:
        """Sanitizing shortens long messages."""
        diagnostic = Diagnostic(code=DiagnosticCode.TEMPLATE_SYNTAX, message="m" * 50)
        formatter = DiagnosticFormatter(
            output_format=OutputFormat.SIMPLE, sanitize=True, max_content_length=10
        )
        assert formatter.format(diagnostic) == "TEMPLATE_SYNTAX: " + "m" * 10 + "..."

    def test_format_all(self, diagnostic: Diagnostic) -> None:
        """Multiple diagnostics are separated by blank lines."""
        output = DiagnosticFormatter(output_format=OutputFormat.SIMPLE).format_all(
            [diagnostic, diagnostic]
        )
        assert output.count("\n\n") == 1

    def test_locale_only_location(self) -> None:
        """A locale without key still gets a location line."""
        diagnostic = ErrorTemplate.resource_root_not_mapping("en", "int")
        assert "  --> en" in DiagnosticFormatter().format(diagnostic)
