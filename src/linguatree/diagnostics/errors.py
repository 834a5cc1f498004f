"""Exception hierarchy with structured diagnostics.

All exceptions optionally store Diagnostic objects for rich error information.
Every error carries enough context (locale, key path, underlying message) to
be actionable without a debugger.

Python 3.13+. Zero external dependencies.
"""

from .codes import Diagnostic

__all__ = [
    "I18nError",
    "InvalidResourceShapeError",
    "ResourceKeyNotFoundError",
    "TemplateExecutionError",
    "TemplateSyntaxError",
]


class I18nError(Exception):
    """Base exception for all linguatree errors.

    Attributes:
        diagnostic: Structured diagnostic information (optional)
    """

    def __init__(self, message: str | Diagnostic) -> None:
        """Initialize I18nError.

        Args:
            message: Error message string OR Diagnostic object
        """
        if isinstance(message, Diagnostic):
            self.diagnostic: Diagnostic | None = message
            super().__init__(message.format_error())
        else:
            self.diagnostic = None
            super().__init__(message)


class InvalidResourceShapeError(I18nError):
    """Loaded locale data does not have the shape of a resource tree.

    Raised when the root is not a mapping, a key is not a string or contains
    the key separator, or a leaf is neither a string, a mapping nor a list.
    Fatal to that load call only; previously loaded data is untouched.

    Attributes:
        locale: Normalized locale tag being loaded
        path: Dotted path of the offending node ("" for the root)
    """

    def __init__(self, message: str | Diagnostic, *, locale: str = "", path: str = "") -> None:
        super().__init__(message)
        self.locale = locale
        self.path = path


class TemplateSyntaxError(I18nError):
    """Template source cannot be compiled into a renderer.

    Raised at load time for unterminated expression markers or expressions
    outside the supported grammar.

    Attributes:
        source: The template source text
    """

    def __init__(self, message: str | Diagnostic, *, source: str = "") -> None:
        super().__init__(message)
        self.source = source


class TemplateExecutionError(I18nError):
    """Sandboxed evaluation of a template failed or exceeded its time budget.

    Wraps whatever went wrong inside the sandbox so callers only ever see
    this single type. A failed render never returns partial output.

    Attributes:
        source: The template source text
        cause: Description of the original failure ("ZeroDivisionError: ...")
        locale: Effective locale of the render, when known
        key: Resource key being rendered, when known
    """

    def __init__(
        self,
        message: str | Diagnostic,
        *,
        source: str = "",
        cause: str = "",
        locale: str | None = None,
        key: str | None = None,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.cause = cause
        self.locale = locale
        self.key = key


class ResourceKeyNotFoundError(I18nError, KeyError):
    """No renderer resolvable through the full fallback chain.

    Raised only when missing-key tolerance is disabled. Subclasses KeyError
    so mapping-style callers can catch it generically.

    Attributes:
        locale: Effective locale tag of the failed lookup
        key: Dotted resource key that was requested
    """

    def __init__(self, message: str | Diagnostic, *, locale: str = "", key: str = "") -> None:
        super().__init__(message)
        self.locale = locale
        self.key = key

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0]) if self.args else ""
