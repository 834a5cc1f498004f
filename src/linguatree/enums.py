"""Enumerations for linguatree type-safe constants.

Uses StrEnum for automatic string conversion.

Python 3.13+.
"""

from enum import StrEnum

__all__ = ["LoadStatus"]


class LoadStatus(StrEnum):
    """Outcome of loading one locale file.

    StrEnum provides automatic string conversion: str(LoadStatus.SUCCESS) == "success"
    """

    SUCCESS = "success"
    """File parsed, compiled and merged into the store."""

    ERROR = "error"
    """File could not be read, parsed or compiled; the store is unchanged for it."""
