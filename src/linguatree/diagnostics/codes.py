"""Diagnostic codes and data structures.

Defines error codes and structured diagnostic messages.
Python 3.13+. Zero external dependencies.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Literal

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
]


class DiagnosticCode(Enum):
    """Error codes with unique identifiers.

    Organized by category:
        1000-1999: Reference errors (missing keys)
        2000-2999: Template errors (compilation and sandboxed execution)
        3000-3999: Resource errors (shape of loaded data)
    """

    # Reference errors (1000-1999)
    RESOURCE_KEY_NOT_FOUND = 1001

    # Template errors (2000-2999)
    TEMPLATE_SYNTAX = 2001
    TEMPLATE_UNTERMINATED_EXPRESSION = 2002
    TEMPLATE_EXECUTION_FAILED = 2003
    TEMPLATE_TIMEOUT = 2004
    TEMPLATE_DEPTH_EXCEEDED = 2005
    TEMPLATE_FORBIDDEN_OPERATION = 2006

    # Resource errors (3000-3999)
    RESOURCE_ROOT_NOT_MAPPING = 3001
    RESOURCE_INVALID_KEY = 3002
    RESOURCE_INVALID_LEAF = 3003


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Structured diagnostic message.

    Inspired by Rust compiler diagnostics. Provides rich error information
    for both humans and tools.

    Attributes:
        code: Unique error code
        message: Human-readable error description
        hint: Suggestion for fixing the error
        locale: Locale tag involved, if any
        key: Dotted resource key involved, if any
        source: Template source involved, if any
        severity: Error severity level
    """

    code: DiagnosticCode
    message: str
    hint: str | None = None
    locale: str | None = None
    key: str | None = None
    source: str | None = None
    severity: Literal["error", "warning"] = "error"

    def __str__(self) -> str:
        """Return human-readable error description."""
        return self.message

    def format_error(self) -> str:
        """Format diagnostic like Rust compiler.

        Example output:
            error[RESOURCE_KEY_NOT_FOUND]: Key 'menu.title' not found for locale 'de'
              --> de:menu.title
              = help: Load the key for this locale or enable allow_missing

        Returns:
            Formatted error message
        """
        from .formatter import DiagnosticFormatter  # noqa: PLC0415 - circular

        return DiagnosticFormatter().format(self)
