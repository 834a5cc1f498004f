"""Tests for runtime/template.py: template splitting, compilation and rendering.

Python 3.13+.
"""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from linguatree.diagnostics import (
    DiagnosticCode,
    TemplateExecutionError,
    TemplateSyntaxError,
)
from linguatree.runtime.template import (
    ConstantRenderer,
    ExpressionSegment,
    TemplateCompiler,
    TemplateRenderer,
    TextSegment,
    compile_template,
    split_template,
)

# ============================================================================
# split_template
# ============================================================================


class TestSplitTemplate:
    """Splitting source text into literal and expression segments."""

    def test_plain_text(self) -> None:
        """Text without markers is one literal segment."""
        assert split_template("hello") == [TextSegment("hello")]

    def test_expression_between_text(self) -> None:
        """Literal runs around an expression are kept."""
        assert split_template("Hi ${name}!") == [
            TextSegment("Hi "),
            ExpressionSegment("name", 3),
            TextSegment("!"),
        ]

    def test_adjacent_expressions(self) -> None:
        """No empty literal segments between adjacent expressions."""
        assert split_template("${a}${b}") == [
            ExpressionSegment("a", 0),
            ExpressionSegment("b", 4),
        ]

    def test_nested_braces(self) -> None:
        """A dict display inside an expression does not end the span."""
        segments = split_template("${ {'a': 1}['a'] } end")
        assert segments[0] == ExpressionSegment(" {'a': 1}['a'] ", 0)
        assert segments[1] == TextSegment(" end")

    def test_braces_inside_quotes(self) -> None:
        """Quoted braces are part of the expression text."""
        segments = split_template("${'}' + x}")
        assert segments == [ExpressionSegment("'}' + x", 0)]

    def test_escaped_quote_inside_string(self) -> None:
        """Backslash-escaped quotes do not close the string."""
        segments = split_template(r"${'it\'s}' + x}")
        assert segments == [ExpressionSegment(r"'it\'s}' + x", 0)]

    def test_unterminated_span(self) -> None:
        """An open marker without a close is a syntax error."""
        with pytest.raises(TemplateSyntaxError) as exc_info:
            split_template("Hello ${name")
        assert exc_info.value.source == "Hello ${name"
        assert exc_info.value.diagnostic is not None
        assert exc_info.value.diagnostic.code == DiagnosticCode.TEMPLATE_UNTERMINATED_EXPRESSION

    def test_lone_dollar_and_brace_are_literal(self) -> None:
        """'$' and '}' outside a marker are plain text."""
        assert split_template("$5 } {x}") == [TextSegment("$5 } {x}")]


# ============================================================================
# TemplateCompiler
# ============================================================================


class TestCompile:
    """Compilation results."""

    def test_constant_short_circuit(self) -> None:
        """Text without a marker compiles to a ConstantRenderer."""
        renderer = TemplateCompiler().compile("Just text")
        assert isinstance(renderer, ConstantRenderer)
        assert renderer({"ignored": 1}) == "Just text"
        assert renderer() == "Just text"

    def test_template_renderer(self) -> None:
        """Text with a marker compiles to a TemplateRenderer."""
        renderer = TemplateCompiler().compile("Hello, ${name}")
        assert isinstance(renderer, TemplateRenderer)
        assert renderer({"name": "Ann"}) == "Hello, Ann"

    def test_source_is_kept(self) -> None:
        """Renderers remember their source."""
        assert TemplateCompiler().compile("a ${b}").source == "a ${b}"
        assert "a ${b}" in repr(TemplateCompiler().compile("a ${b}"))

    def test_invalid_expression_is_syntax_error(self) -> None:
        """Parse failures are reported at compile time with the source."""
        with pytest.raises(TemplateSyntaxError) as exc_info:
            TemplateCompiler().compile("Total: ${1 +}")
        assert exc_info.value.source == "Total: ${1 +}"
        assert exc_info.value.diagnostic is not None
        assert exc_info.value.diagnostic.code == DiagnosticCode.TEMPLATE_SYNTAX

    def test_empty_expression_is_syntax_error(self) -> None:
        """'${}' has nothing to evaluate."""
        with pytest.raises(TemplateSyntaxError):
            TemplateCompiler().compile("${}")

    def test_forbidden_expression_is_syntax_error(self) -> None:
        """Sandbox violations detectable statically fail compilation."""
        with pytest.raises(TemplateSyntaxError, match="__class__"):
            TemplateCompiler().compile("${x.__class__}")

    def test_timeout_property(self) -> None:
        """The configured budget is exposed."""
        assert TemplateCompiler(timeout=0.25).timeout == 0.25

    def test_module_level_compile(self) -> None:
        """compile_template uses a shared default compiler."""
        assert compile_template("${a + b}")({"a": 1, "b": 2}) == "3"


class TestRender:
    """Rendering behaviour."""

    def test_literal_characters_round_trip(self) -> None:
        """Backticks, quotes, backslashes and braces in text survive unchanged."""
        source = "`tick` \"dq\" 'sq' \\n {brace} $ ${name} `end`\\"
        assert TemplateCompiler().compile(source)({"name": "X"}) == (
            "`tick` \"dq\" 'sq' \\n {brace} $ X `end`\\"
        )

    def test_none_renders_empty(self) -> None:
        """None values render as the empty string."""
        assert compile_template("[${value}]")({"value": None}) == "[]"

    def test_values_stringified(self) -> None:
        """Non-string results use str()."""
        assert compile_template("${n} ${flag} ${items}")(
            {"n": 2.5, "flag": True, "items": [1]}
        ) == "2.5 True [1]"

    def test_runtime_error_wrapped(self) -> None:
        """Evaluation errors become TemplateExecutionError with the cause."""
        renderer = compile_template("Value: ${1 / n}")
        with pytest.raises(TemplateExecutionError) as exc_info:
            renderer({"n": 0})
        error = exc_info.value
        assert error.source == "Value: ${1 / n}"
        assert error.cause.startswith("ZeroDivisionError")
        assert isinstance(error.__cause__, ZeroDivisionError)
        assert error.locale is None
        assert error.key is None

    def test_missing_name_wrapped(self) -> None:
        """Missing data is reported as an execution error."""
        with pytest.raises(TemplateExecutionError, match="NameError"):
            compile_template("Hello, ${name}")({})

    def test_host_function_error_wrapped(self) -> None:
        """Exceptions from data functions are wrapped too."""

        def boom() -> str:
            msg = "boom"
            raise RuntimeError(msg)

        with pytest.raises(TemplateExecutionError, match="RuntimeError: boom"):
            compile_template("${boom()}")({"boom": boom})

    def test_timeout_wrapped(self) -> None:
        """Deadline expiry surfaces as TemplateExecutionError."""
        compiler = TemplateCompiler(timeout=0.05)
        renderer = compiler.compile(
            "${(lambda f: f(f, 22))(lambda g, n: 0 if n == 0 else g(g, n - 1) + g(g, n - 1))}"
        )
        with pytest.raises(TemplateExecutionError, match="SandboxTimeoutError"):
            renderer({})

    def test_depth_overflow_wrapped(self) -> None:
        """Depth guard failures surface as TemplateExecutionError."""
        renderer = compile_template("${(lambda f: f(f))(lambda f: f(f))}")
        with pytest.raises(TemplateExecutionError, match="DepthLimitExceededError"):
            renderer({})

    def test_renderer_is_reusable(self) -> None:
        """A compiled renderer can be called repeatedly with different data."""
        renderer = compile_template("${n * 2}")
        assert [renderer({"n": n}) for n in range(3)] == ["0", "2", "4"]

    def test_data_not_mutated(self) -> None:
        """Rendering never changes the caller's mapping."""
        data = {"items": [1, 2]}
        compile_template("${[*items, 3]}")(data)
        assert data == {"items": [1, 2]}

    @given(text=st.text().filter(lambda s: "${" not in s))
    def test_plain_text_is_identity(self, text: str) -> None:
        """Text without markers always renders to itself."""
        assert TemplateCompiler().compile(text)({}) == text

    @given(
        prefix=st.text().filter(lambda s: "${" not in s and not s.endswith("$")),
        suffix=st.text().filter(lambda s: "${" not in s),
    )
    def test_literal_text_preserved_around_expression(self, prefix: str, suffix: str) -> None:
        """Literal runs around an expression round-trip byte for byte."""
        renderer = TemplateCompiler().compile(prefix + "${value}" + suffix)
        assert renderer({"value": "V"}) == prefix + "V" + suffix
