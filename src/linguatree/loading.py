"""Locale file loading for ResourceStore.

Reads every ``<locale>.json``, ``<locale>.yaml`` and ``<locale>.yml`` file in
a directory, takes the locale tag from the file stem, and hands the parsed
data to ResourceStore.load_resource(). File I/O lives here so the store only
ever sees already-parsed data.

Components:
    DirectoryResourceLoader - Directory scanner and file parser
    ResourceLoadResult - Immutable result of a single file load
    LoadSummary - Immutable aggregate of a directory load

Python 3.13+. External dependency: PyYAML for YAML files.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import yaml

from linguatree.constants import DEFAULT_EXTENSIONS
from linguatree.enums import LoadStatus
from linguatree.locale_utils import normalize_locale

if TYPE_CHECKING:
    from linguatree.runtime.store import ResourceStore

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Loader
    "DirectoryResourceLoader",
    "read_locale_file",
    # Load result types
    "ResourceLoadResult",
    "LoadSummary",
]

logger = logging.getLogger(__name__)

_JSON_EXTENSIONS = frozenset({".json"})
_YAML_EXTENSIONS = frozenset({".yaml", ".yml"})


def read_locale_file(path: Path) -> object:
    """Parse one locale file by extension.

    A leading UTF-8 byte order mark is ignored.

    Args:
        path: File ending in .json, .yaml or .yml

    Returns:
        Parsed document (a mapping for well-formed locale files)

    Raises:
        ValueError: Unsupported extension, or malformed JSON
        yaml.YAMLError: Malformed YAML
        OSError: File cannot be read
    """
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8-sig")
    if suffix in _JSON_EXTENSIONS:
        return json.loads(text)
    if suffix in _YAML_EXTENSIONS:
        return yaml.safe_load(text)
    msg = f"Unsupported locale file extension: '{path.suffix}'"
    raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class DirectoryResourceLoader:
    """Loads every locale file in one directory into a ResourceStore.

    Files are processed in sorted name order, so "en.json" merges before
    "en.yaml" when both exist. Files with other extensions are ignored.

    Example:
        >>> loader = DirectoryResourceLoader("locales")
        >>> summary = loader.load_into(store)
        >>> summary.successful
        3

    Attributes:
        directory: Directory containing locale files
        extensions: File extensions to load (subset of .json/.yaml/.yml)
    """

    directory: Path | str
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    _path: Path = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Resolve the directory and validate extensions.

        Raises:
            ValueError: If an extension is not a supported locale file type
        """
        normalized = tuple(ext.lower() for ext in self.extensions)
        unsupported = [ext for ext in normalized if ext not in _JSON_EXTENSIONS | _YAML_EXTENSIONS]
        if unsupported:
            msg = f"Unsupported locale file extensions: {unsupported}"
            raise ValueError(msg)
        object.__setattr__(self, "extensions", normalized)
        object.__setattr__(self, "_path", Path(self.directory))

    def locale_files(self) -> list[Path]:
        """Locale files in the directory, sorted by name.

        Raises:
            FileNotFoundError: If the directory does not exist
        """
        if not self._path.is_dir():
            msg = f"Locales directory '{self._path}' not found"
            raise FileNotFoundError(msg)
        return sorted(
            path
            for path in self._path.iterdir()
            if path.is_file() and path.suffix.lower() in self.extensions
        )

    def load_into(self, store: ResourceStore, *, strict: bool = True) -> LoadSummary:
        """Parse every locale file and load it into store.

        Args:
            store: Target store
            strict: Re-raise the first failure instead of recording it

        Returns:
            LoadSummary with one result per file

        Raises:
            FileNotFoundError: If the directory does not exist
            Exception: In strict mode, whatever reading or loading a file raised
        """
        results: list[ResourceLoadResult] = []
        for path in self.locale_files():
            locale_code = normalize_locale(path.stem)
            try:
                store.load_resource(locale_code, read_locale_file(path))
            except Exception as exc:  # pylint: disable=broad-exception-caught
                if strict:
                    raise
                logger.warning("Failed to load %s: %s", path, exc)
                results.append(
                    ResourceLoadResult(locale_code, str(path), LoadStatus.ERROR, error=exc)
                )
            else:
                results.append(ResourceLoadResult(locale_code, str(path), LoadStatus.SUCCESS))

        summary = LoadSummary(tuple(results))
        logger.info("Loaded locales from %s: %r", self._path, summary)
        return summary


@dataclass(frozen=True, slots=True)
class ResourceLoadResult:
    """Result of loading a single locale file.

    Attributes:
        locale: Normalized locale tag taken from the file stem
        source_path: Path of the file
        status: Load status (success, error)
        error: Exception if status is ERROR, None otherwise
    """

    locale: str
    source_path: str
    status: LoadStatus
    error: Exception | None = None

    @property
    def is_success(self) -> bool:
        """Check if the file loaded successfully."""
        return self.status == LoadStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        """Check if the file failed to load."""
        return self.status == LoadStatus.ERROR


@dataclass(frozen=True, slots=True)
class LoadSummary:
    """Immutable aggregate of one directory load.

    All statistics are computed from the ``results`` tuple.

    Attributes:
        results: All individual load results
    """

    results: tuple[ResourceLoadResult, ...]

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        return (
            f"LoadSummary(total={self.total_attempted}, "
            f"ok={self.successful}, "
            f"errors={self.errors})"
        )

    @property
    def total_attempted(self) -> int:
        """Total number of files attempted."""
        return len(self.results)

    @property
    def successful(self) -> int:
        """Number of successful loads."""
        return sum(1 for r in self.results if r.is_success)

    @property
    def errors(self) -> int:
        """Number of failed loads."""
        return sum(1 for r in self.results if r.is_error)

    @property
    def locales(self) -> tuple[str, ...]:
        """Distinct locale tags loaded successfully, in load order."""
        return tuple(dict.fromkeys(r.locale for r in self.results if r.is_success))

    def get_errors(self) -> tuple[ResourceLoadResult, ...]:
        """Get all results with errors."""
        return tuple(r for r in self.results if r.is_error)

    def get_by_locale(self, locale: str) -> tuple[ResourceLoadResult, ...]:
        """Get all results for a locale (any spelling)."""
        code = normalize_locale(locale)
        return tuple(r for r in self.results if r.locale == code)

    @property
    def has_errors(self) -> bool:
        """Check if any file failed to load."""
        return self.errors > 0

    @property
    def all_successful(self) -> bool:
        """Check if every attempted file loaded."""
        return self.errors == 0
