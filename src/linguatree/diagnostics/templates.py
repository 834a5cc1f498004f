"""Error message templates.

Centralized error message templates for testable, consistent error messages.
Python 3.13+. Zero external dependencies.
"""

from .codes import Diagnostic, DiagnosticCode

__all__ = ["ErrorTemplate"]

# Template sources are echoed in diagnostics; keep them readable.
_SOURCE_PREVIEW: int = 60


def _preview(source: str) -> str:
    if len(source) <= _SOURCE_PREVIEW:
        return source
    return source[:_SOURCE_PREVIEW] + "..."


class ErrorTemplate:
    """Centralized error message templates.

    All error messages are created here. NO f-strings in exception constructors!
    This provides:
        - Testable error messages
        - Consistent formatting
        - Documentation of all error cases
    """

    @staticmethod
    def resource_key_not_found(locale: str, key: str) -> Diagnostic:
        """Key not resolvable through the fallback chain.

        Args:
            locale: Effective locale tag
            key: Dotted resource key

        Returns:
            Diagnostic for RESOURCE_KEY_NOT_FOUND
        """
        msg = f"Resource '{locale}.{key}' not found"
        return Diagnostic(
            code=DiagnosticCode.RESOURCE_KEY_NOT_FOUND,
            message=msg,
            hint="Load the key for this locale, or enable allow_missing",
            locale=locale,
            key=key,
        )

    @staticmethod
    def unterminated_expression(source: str, offset: int) -> Diagnostic:
        """Expression marker opened but never closed.

        Args:
            source: Template source
            offset: Character offset of the opening marker

        Returns:
            Diagnostic for TEMPLATE_UNTERMINATED_EXPRESSION
        """
        msg = f"Unterminated expression at offset {offset} in template '{_preview(source)}'"
        return Diagnostic(
            code=DiagnosticCode.TEMPLATE_UNTERMINATED_EXPRESSION,
            message=msg,
            hint="Close every '${' with a matching '}'",
            source=source,
        )

    @staticmethod
    def template_syntax(source: str, expression: str, detail: str) -> Diagnostic:
        """Embedded expression cannot be parsed.

        Args:
            source: Template source
            expression: The offending expression text
            detail: Parser error description

        Returns:
            Diagnostic for TEMPLATE_SYNTAX
        """
        msg = f"Invalid expression '{expression}' in template '{_preview(source)}': {detail}"
        return Diagnostic(
            code=DiagnosticCode.TEMPLATE_SYNTAX,
            message=msg,
            hint="Expressions use Python syntax, e.g. ${name} or ${pluralize(n, forms)}",
            source=source,
        )

    @staticmethod
    def template_execution_failed(
        source: str,
        cause: str,
        locale: str | None = None,
        key: str | None = None,
    ) -> Diagnostic:
        """Sandboxed evaluation raised.

        Args:
            source: Template source
            cause: Description of the original failure
            locale: Effective locale, when rendered through a context
            key: Resource key, when rendered through a context

        Returns:
            Diagnostic for TEMPLATE_EXECUTION_FAILED
        """
        where = f" ('{locale}.{key}')" if locale is not None and key is not None else ""
        msg = f"Template{where} failed: {cause}"
        return Diagnostic(
            code=DiagnosticCode.TEMPLATE_EXECUTION_FAILED,
            message=msg,
            hint="Check that every name used in the template is provided in the data",
            locale=locale,
            key=key,
            source=source,
        )

    @staticmethod
    def template_timeout(timeout: float) -> Diagnostic:
        """Evaluation exceeded the wall-clock budget.

        Args:
            timeout: Budget in seconds

        Returns:
            Diagnostic for TEMPLATE_TIMEOUT
        """
        msg = f"Template evaluation exceeded {timeout * 1000:g} ms"
        return Diagnostic(code=DiagnosticCode.TEMPLATE_TIMEOUT, message=msg)

    @staticmethod
    def expression_depth_exceeded(max_depth: int) -> Diagnostic:
        """Expression nesting exceeded the depth limit.

        Args:
            max_depth: Maximum allowed depth

        Returns:
            Diagnostic for TEMPLATE_DEPTH_EXCEEDED
        """
        msg = f"Maximum nesting depth exceeded (max: {max_depth})"
        return Diagnostic(
            code=DiagnosticCode.TEMPLATE_DEPTH_EXCEEDED,
            message=msg,
            hint="Reduce nesting or check for runaway recursion",
        )

    @staticmethod
    def forbidden_operation(detail: str) -> Diagnostic:
        """Expression uses something outside the sandbox grammar.

        Args:
            detail: What was refused

        Returns:
            Diagnostic for TEMPLATE_FORBIDDEN_OPERATION
        """
        return Diagnostic(code=DiagnosticCode.TEMPLATE_FORBIDDEN_OPERATION, message=detail)

    @staticmethod
    def resource_root_not_mapping(locale: str, type_name: str) -> Diagnostic:
        """Loaded data root is not a mapping.

        Args:
            locale: Normalized locale tag
            type_name: Type of the received root

        Returns:
            Diagnostic for RESOURCE_ROOT_NOT_MAPPING
        """
        msg = f"Locale '{locale}' must contain an object at root, got {type_name}"
        return Diagnostic(
            code=DiagnosticCode.RESOURCE_ROOT_NOT_MAPPING,
            message=msg,
            locale=locale,
        )

    @staticmethod
    def resource_invalid_key(locale: str, path: str, key: object) -> Diagnostic:
        """Tree key is not a usable path segment.

        Args:
            locale: Normalized locale tag
            path: Dotted path of the parent node
            key: Offending key

        Returns:
            Diagnostic for RESOURCE_INVALID_KEY
        """
        where = path or "<root>"
        msg = f"Invalid key {key!r} under '{where}' in locale '{locale}'"
        return Diagnostic(
            code=DiagnosticCode.RESOURCE_INVALID_KEY,
            message=msg,
            hint="Keys must be non-empty strings without '.'",
            locale=locale,
            key=path or None,
        )

    @staticmethod
    def resource_invalid_leaf(locale: str, path: str, type_name: str) -> Diagnostic:
        """Leaf value is not a template string.

        Args:
            locale: Normalized locale tag
            path: Dotted path of the leaf
            type_name: Type of the received value

        Returns:
            Diagnostic for RESOURCE_INVALID_LEAF
        """
        msg = f"Unsupported value of type {type_name} at '{path}' in locale '{locale}'"
        return Diagnostic(
            code=DiagnosticCode.RESOURCE_INVALID_LEAF,
            message=msg,
            hint="Quote numbers and booleans so they load as template strings",
            locale=locale,
            key=path,
        )
