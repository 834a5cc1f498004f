"""Resource tree store: compiled, merged, per-locale resource trees.

Raw locale data (already-parsed JSON/YAML style objects) is compiled into a
tree whose every leaf is a Renderer, then deep-merged into whatever was
loaded for that locale before. The store is the single writer of the
repository; contexts only read from it.

Resource values form a closed union, matched exhaustively at every
traversal site:

    Renderer           compiled template leaf
    ResourceTree       dict of key segment -> resource value
    ResourceSequence   tuple of resource values

Thread Safety:
    Reads never mutate state. Concurrent loads/resets of the same locale must
    be serialized by the caller.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from linguatree.constants import KEY_SEPARATOR, MAX_DEPTH
from linguatree.core.depth_guard import DepthGuard
from linguatree.diagnostics import ErrorTemplate, InvalidResourceShapeError
from linguatree.locale_utils import is_known_locale, normalize_locale
from linguatree.runtime.cache import KeySetCache
from linguatree.runtime.template import Renderer, TemplateCompiler

__all__ = [
    "ResourceSequence",
    "ResourceStore",
    "ResourceTree",
    "ResourceValue",
    "collect_keys",
    "compile_resource",
    "deep_merge",
]

logger = logging.getLogger(__name__)

type ResourceValue = Renderer | ResourceTree | ResourceSequence
type ResourceTree = dict[str, ResourceValue]
type ResourceSequence = tuple[ResourceValue, ...]


def compile_resource(
    locale_code: str,
    data: object,
    compiler: TemplateCompiler,
    *,
    max_depth: int = MAX_DEPTH,
) -> ResourceTree:
    """Compile raw locale data into a resource tree.

    Args:
        locale_code: Normalized locale tag (used in error messages)
        data: Parsed locale data; the root must be a mapping
        compiler: Compiler for string leaves
        max_depth: Maximum nesting of the raw data

    Returns:
        Freshly built tree; the input is not modified

    Raises:
        InvalidResourceShapeError: Root not a mapping, bad key, or bad leaf
        TemplateSyntaxError: A string leaf is not a valid template
        DepthLimitExceededError: Data nested deeper than max_depth
    """
    if not isinstance(data, Mapping):
        raise InvalidResourceShapeError(
            ErrorTemplate.resource_root_not_mapping(locale_code, type(data).__name__),
            locale=locale_code,
        )
    guard = DepthGuard(max_depth=max_depth)
    return _compile_tree(locale_code, data, "", compiler, guard)


def _compile_tree(
    locale_code: str,
    data: Mapping[Any, Any],
    path: str,
    compiler: TemplateCompiler,
    guard: DepthGuard,
) -> ResourceTree:
    tree: ResourceTree = {}
    for key, value in data.items():
        # YAML reads `404: Not found` with an int key.
        if isinstance(key, int) and not isinstance(key, bool):
            key = str(key)
        if not isinstance(key, str) or not key or KEY_SEPARATOR in key:
            raise InvalidResourceShapeError(
                ErrorTemplate.resource_invalid_key(locale_code, path, key),
                locale=locale_code,
                path=path,
            )
        tree[key] = _compile_value(locale_code, value, _join(path, key), compiler, guard)
    return tree


def _compile_value(
    locale_code: str,
    value: object,
    path: str,
    compiler: TemplateCompiler,
    guard: DepthGuard,
) -> ResourceValue:
    with guard:
        match value:
            case str():
                return compiler.compile(value)
            case Mapping():
                return _compile_tree(locale_code, value, path, compiler, guard)
            case list() | tuple():
                return tuple(
                    _compile_value(locale_code, item, _join(path, str(index)), compiler, guard)
                    for index, item in enumerate(value)
                )
            case _:
                raise InvalidResourceShapeError(
                    ErrorTemplate.resource_invalid_leaf(locale_code, path, type(value).__name__),
                    locale=locale_code,
                    path=path,
                )


def _join(prefix: str, segment: str) -> str:
    return f"{prefix}{KEY_SEPARATOR}{segment}" if prefix else segment


def deep_merge(existing: ResourceTree, incoming: ResourceTree) -> ResourceTree:
    """Merge incoming into existing without mutating either.

    Where both sides hold a tree the trees merge recursively; otherwise the
    incoming value replaces the existing one (tree replaced by a leaf and
    vice versa included).

    Example:
        >>> a = {"menu": {"title": "A", "back": "B"}}
        >>> b = {"menu": {"title": "C"}}
        >>> deep_merge(a, b)
        {'menu': {'title': 'C', 'back': 'B'}}
    """
    merged: ResourceTree = dict(existing)
    for key, value in incoming.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def collect_keys(tree: ResourceTree, prefix: str = "") -> list[str]:
    """Dotted paths of every non-tree value, depth first.

    Sequences count as leaves: their path is listed, not their elements.
    """
    keys: list[str] = []
    for key, value in tree.items():
        path = _join(prefix, key)
        match value:
            case dict():
                keys.extend(collect_keys(value, path))
            case Renderer() | tuple():
                keys.append(path)
    return keys


class ResourceStore:
    """Repository of compiled resource trees keyed by locale tag.

    Example:
        >>> store = ResourceStore()
        >>> store.load_resource("en", {"greeting": "Hello, ${name}"})
        >>> store.lookup("en", "greeting")({"name": "Ann"})
        'Hello, Ann'
        >>> store.resource_keys("en")
        ('greeting',)
    """

    __slots__ = ("_compiler", "_key_cache", "_max_depth", "_trees", "_unrecognized")

    def __init__(
        self,
        compiler: TemplateCompiler | None = None,
        *,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        """Initialize store.

        Args:
            compiler: Template compiler for string leaves (default limits if None)
            max_depth: Maximum nesting of loaded data
        """
        self._compiler = compiler if compiler is not None else TemplateCompiler()
        self._max_depth = max_depth
        self._trees: dict[str, ResourceTree] = {}
        self._key_cache = KeySetCache()
        self._unrecognized: set[str] = set()

    @property
    def compiler(self) -> TemplateCompiler:
        """Compiler used for string leaves."""
        return self._compiler

    @property
    def key_cache(self) -> KeySetCache:
        """Key-set cache backing the coverage queries."""
        return self._key_cache

    # ------------------------------------------------------------------
    # Writers
    # ------------------------------------------------------------------

    def load_resource(self, locale_code: str, data: object) -> None:
        """Compile data and deep-merge it into the locale's tree.

        Compilation happens before anything is stored, so a failed load
        leaves the repository untouched.

        Args:
            locale_code: Locale tag (any spelling)
            data: Parsed locale data with a mapping at the root

        Raises:
            InvalidResourceShapeError: Data is not a resource tree
            TemplateSyntaxError: A string leaf is not a valid template
        """
        code = normalize_locale(locale_code)
        compiled = compile_resource(code, data, self._compiler, max_depth=self._max_depth)

        if code not in self._unrecognized and not is_known_locale(code):
            self._unrecognized.add(code)
            logger.warning("Locale %r is not recognized by CLDR data; loading anyway", code)

        self._trees[code] = deep_merge(self._trees.get(code, {}), compiled)
        if self._key_cache.invalidate(code):
            logger.debug("Key-set cache invalidated for %s", code)
        logger.info("Loaded locale %s: %d top-level keys merged", code, len(compiled))

    def reset_resource(self, locale_code: str | None = None) -> None:
        """Remove one locale's tree, or every tree when no locale is given."""
        if locale_code is None:
            self._trees.clear()
            self._key_cache.clear()
            logger.info("Reset all locales")
            return

        code = normalize_locale(locale_code)
        self._trees.pop(code, None)
        self._key_cache.invalidate(code)
        logger.info("Reset locale %s", code)

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------

    def available_locales(self) -> tuple[str, ...]:
        """Normalized tags of loaded locales, in load order."""
        return tuple(self._trees)

    def has_locale(self, locale_code: str) -> bool:
        """Check whether a tree is loaded for the locale."""
        return normalize_locale(locale_code) in self._trees

    def __contains__(self, locale_code: object) -> bool:
        return isinstance(locale_code, str) and self.has_locale(locale_code)

    def get_template(self, locale_code: str, key: str = "") -> ResourceValue | None:
        """Resolve a dotted key to whatever value it addresses.

        Numeric segments index into sequences ("steps.0"). An empty key
        addresses the locale's whole tree.

        Returns:
            Renderer, tree or sequence; None if the path does not exist
        """
        node: ResourceValue | None = self._trees.get(normalize_locale(locale_code))
        if not key:
            return node
        for segment in key.split(KEY_SEPARATOR):
            match node:
                case dict():
                    node = node.get(segment)
                case tuple() if segment.isdigit() and int(segment) < len(node):
                    node = node[int(segment)]
                case _:
                    return None
        return node

    def lookup(self, locale_code: str, key: str) -> Renderer | None:
        """Renderer addressed by key, or None if the key is absent or not a leaf."""
        value = self.get_template(locale_code, key)
        return value if isinstance(value, Renderer) else None

    # ------------------------------------------------------------------
    # Key coverage
    # ------------------------------------------------------------------

    def resource_keys(self, locale_code: str) -> tuple[str, ...]:
        """Dotted key paths reachable in a locale (empty for unknown locales)."""
        code = normalize_locale(locale_code)
        cached = self._key_cache.get(code)
        if cached is not None:
            return cached
        keys = tuple(collect_keys(self._trees.get(code, {})))
        self._key_cache.put(code, keys)
        return keys

    def missing_keys(self, target: str, reference: str) -> tuple[str, ...]:
        """Keys of reference that target lacks, in reference order."""
        present = frozenset(self.resource_keys(target))
        return tuple(key for key in self.resource_keys(reference) if key not in present)

    def overspecified_keys(self, target: str, reference: str) -> tuple[str, ...]:
        """Keys of target that reference lacks, in target order."""
        return self.missing_keys(reference, target)

    def translation_progress(self, target: str, reference: str) -> float:
        """Share of reference keys present in target, in [0, 1].

        A reference with no keys counts as fully translated.
        """
        total = len(self.resource_keys(reference))
        if total == 0:
            return 1.0
        return (total - len(self.missing_keys(target, reference))) / total

    def __repr__(self) -> str:
        return f"ResourceStore(locales={list(self._trees)!r})"
