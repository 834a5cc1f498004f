"""Diagnostic system for linguatree errors.

Provides structured error diagnostics with codes, hints and context.
Inspired by Rust compiler diagnostics and Elm error messages.

Python 3.13+. Zero external dependencies.
"""

from .codes import Diagnostic, DiagnosticCode
from .errors import (
    I18nError,
    InvalidResourceShapeError,
    ResourceKeyNotFoundError,
    TemplateExecutionError,
    TemplateSyntaxError,
)
from .formatter import DiagnosticFormatter, OutputFormat
from .templates import ErrorTemplate

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "DiagnosticFormatter",
    "ErrorTemplate",
    "I18nError",
    "InvalidResourceShapeError",
    "OutputFormat",
    "ResourceKeyNotFoundError",
    "TemplateExecutionError",
    "TemplateSyntaxError",
]
