"""Template compilation: source text to reusable renderers.

A template is literal text with embedded ``${ expression }`` spans. Literal
text is kept verbatim and never re-parsed, so any character (quotes,
backticks, backslashes, stray braces) survives compilation unchanged.
Expressions are parsed once at compile time and evaluated per render by the
SandboxEvaluator.

Text without an expression marker compiles to a ConstantRenderer and never
touches the sandbox.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import ast
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from linguatree.constants import (
    DEFAULT_TEMPLATE_TIMEOUT,
    EXPRESSION_CLOSE,
    EXPRESSION_OPEN,
    MAX_DEPTH,
)
from linguatree.diagnostics import (
    ErrorTemplate,
    TemplateExecutionError,
    TemplateSyntaxError,
)
from linguatree.runtime.sandbox import (
    SandboxEvaluator,
    SandboxViolationError,
    parse_expression,
)

__all__ = [
    "ConstantRenderer",
    "ExpressionSegment",
    "Renderer",
    "TemplateCompiler",
    "TemplateRenderer",
    "TextSegment",
    "compile_template",
    "split_template",
]

_QUOTES = frozenset("'\"")


@dataclass(frozen=True, slots=True)
class TextSegment:
    """Literal text between expressions."""

    text: str


@dataclass(frozen=True, slots=True)
class ExpressionSegment:
    """Expression text found inside a ``${ }`` span.

    Attributes:
        text: Expression source without the markers
        offset: Character offset of the opening marker in the template
    """

    text: str
    offset: int


type Segment = TextSegment | ExpressionSegment


def split_template(source: str) -> list[Segment]:
    """Split template source into literal and expression segments.

    An expression span ends at the ``}`` that balances its opening brace;
    braces inside quoted strings are ignored, so dict displays and
    f-strings work inside expressions.

    Args:
        source: Template source text

    Returns:
        Segments in source order (empty literal runs are omitted)

    Raises:
        TemplateSyntaxError: If a span is never closed

    Example:
        >>> split_template("Hi ${name}!")
        [TextSegment(text='Hi '), ExpressionSegment(text='name', offset=3), TextSegment(text='!')]
    """
    segments: list[Segment] = []
    pos = 0
    while True:
        start = source.find(EXPRESSION_OPEN, pos)
        if start < 0:
            if pos < len(source):
                segments.append(TextSegment(source[pos:]))
            return segments
        if start > pos:
            segments.append(TextSegment(source[pos:start]))
        body_start = start + len(EXPRESSION_OPEN)
        end = _find_span_end(source, body_start)
        if end < 0:
            raise TemplateSyntaxError(
                ErrorTemplate.unterminated_expression(source, start), source=source
            )
        segments.append(ExpressionSegment(source[body_start:end], start))
        pos = end + len(EXPRESSION_CLOSE)


def _find_span_end(source: str, pos: int) -> int:
    """Index of the closing marker for a span whose body starts at pos, or -1."""
    depth = 0
    quote: str | None = None
    i = pos
    while i < len(source):
        char = source[i]
        if quote is not None:
            if char == "\\":
                i += 2
                continue
            if char == quote:
                quote = None
        elif char in _QUOTES:
            quote = char
        elif char == "{":
            depth += 1
        elif char == EXPRESSION_CLOSE:
            if depth == 0:
                return i
            depth -= 1
        i += 1
    return -1


class Renderer:
    """Compiled template: call with a data mapping to get the final string.

    Attributes:
        source: Template source text the renderer was compiled from
    """

    __slots__ = ("source",)

    def __init__(self, source: str) -> None:
        self.source = source

    def __call__(self, data: Mapping[str, Any] | None = None) -> str:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.source!r})"


class ConstantRenderer(Renderer):
    """Renderer for text without expressions; ignores the data."""

    __slots__ = ()

    def __call__(self, data: Mapping[str, Any] | None = None) -> str:
        return self.source


class TemplateRenderer(Renderer):
    """Renderer evaluating parsed expressions in the sandbox.

    Each call evaluates against a fresh copy of the supplied data, so an
    expression cannot leak state into later renders. The whole render shares
    one deadline. Any failure is raised as TemplateExecutionError and no
    partial output is returned.
    """

    __slots__ = ("_evaluator", "_parts")

    def __init__(
        self,
        source: str,
        parts: list[str | ast.Expression],
        evaluator: SandboxEvaluator,
    ) -> None:
        super().__init__(source)
        self._parts = tuple(parts)
        self._evaluator = evaluator

    def __call__(self, data: Mapping[str, Any] | None = None) -> str:
        try:
            evaluation = self._evaluator.start(data or {})
            pieces: list[str] = []
            for part in self._parts:
                if isinstance(part, str):
                    pieces.append(part)
                else:
                    pieces.append(_stringify(evaluation.run(part)))
        except TemplateExecutionError:
            raise
        except Exception as exc:  # pylint: disable=broad-exception-caught
            cause = f"{type(exc).__name__}: {exc}"
            raise TemplateExecutionError(
                ErrorTemplate.template_execution_failed(self.source, cause),
                source=self.source,
                cause=cause,
            ) from exc
        return "".join(pieces)


def _stringify(value: Any) -> str:
    return "" if value is None else str(value)


class TemplateCompiler:
    """Compiles template sources into renderers.

    Example:
        >>> compiler = TemplateCompiler()
        >>> render = compiler.compile("Hello, ${name}")
        >>> render({"name": "Ann"})
        'Hello, Ann'
    """

    __slots__ = ("_evaluator",)

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TEMPLATE_TIMEOUT,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        """Initialize compiler.

        Args:
            timeout: Wall-clock budget per render, in seconds
            max_depth: Maximum expression nesting depth
        """
        self._evaluator = SandboxEvaluator(timeout=timeout, max_depth=max_depth)

    @property
    def timeout(self) -> float:
        """Wall-clock budget per render, in seconds."""
        return self._evaluator.timeout

    def compile(self, source: str) -> Renderer:
        """Compile template source.

        Args:
            source: Template text

        Returns:
            ConstantRenderer when there is no expression marker, otherwise a
            TemplateRenderer

        Raises:
            TemplateSyntaxError: Unterminated span or invalid expression
        """
        if EXPRESSION_OPEN not in source:
            return ConstantRenderer(source)

        parts: list[str | ast.Expression] = []
        for segment in split_template(source):
            match segment:
                case TextSegment(text=text):
                    parts.append(text)
                case ExpressionSegment(text=text):
                    parts.append(self._parse(source, text))
        return TemplateRenderer(source, parts, self._evaluator)

    @staticmethod
    def _parse(source: str, expression: str) -> ast.Expression:
        try:
            return parse_expression(expression)
        except SyntaxError as exc:
            raise TemplateSyntaxError(
                ErrorTemplate.template_syntax(source, expression, exc.msg or "invalid syntax"),
                source=source,
            ) from exc
        except SandboxViolationError as exc:
            detail = exc.diagnostic.message if exc.diagnostic else str(exc)
            raise TemplateSyntaxError(
                ErrorTemplate.template_syntax(source, expression, detail),
                source=source,
            ) from exc


_default_compiler = TemplateCompiler()


def compile_template(source: str) -> Renderer:
    """Compile with a shared compiler using default limits."""
    return _default_compiler.compile(source)
