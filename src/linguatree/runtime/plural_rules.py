"""Table-driven plural form selection.

Maps languages to plural rule families and selects the grammatically
correct word form for a count.

Each family is a pure function from count to a zero-based form index:

    english    one / other                       (n != 1)
    french     one / other, zero counts as one   (n > 1)
    russian    one / few / many by tens and units
    czech      one / few (2-4) / other
    polish     one / few by units / many
    icelandic  one / other, singular for units of 1 except 11
    chinese    single invariant form
    arabic     zero / one / two / few / many / other

Languages missing from the table fall back to the default language's family
after a one-time warning per tag. Warning state belongs to the PluralEngine
instance, not the process.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from decimal import Decimal
from enum import StrEnum

from linguatree.constants import DEFAULT_LANGUAGE
from linguatree.locale_utils import base_language, normalize_locale

__all__ = [
    "LANGUAGE_RULES",
    "PLURAL_RULES",
    "PluralEngine",
    "PluralRule",
    "get_default_engine",
    "pluralize",
]

logger = logging.getLogger(__name__)

type Count = int | float | Decimal
type Form = str | Callable[[Count], str]


class PluralRule(StrEnum):
    """Plural rule families, named after a representative language."""

    ENGLISH = "english"
    FRENCH = "french"
    RUSSIAN = "russian"
    CZECH = "czech"
    POLISH = "polish"
    ICELANDIC = "icelandic"
    CHINESE = "chinese"
    ARABIC = "arabic"


def _english(n: Count) -> int:
    return 0 if n == 1 else 1


def _french(n: Count) -> int:
    return 1 if n > 1 else 0


def _russian(n: Count) -> int:
    if n % 10 == 1 and n % 100 != 11:
        return 0
    return 1 if 2 <= n % 10 <= 4 and not 10 <= n % 100 < 20 else 2


def _czech(n: Count) -> int:
    if n == 1:
        return 0
    return 1 if 2 <= n <= 4 else 2


def _polish(n: Count) -> int:
    if n == 1:
        return 0
    return 1 if 2 <= n % 10 <= 4 and not 10 <= n % 100 < 20 else 2


def _icelandic(n: Count) -> int:
    return 1 if n % 10 != 1 or n % 100 == 11 else 0


def _chinese(n: Count) -> int:
    return 0


def _arabic(n: Count) -> int:
    if n in (0, 1, 2):
        return int(n)
    if n % 100 <= 10:
        return 3
    if n >= 11 and n % 100 <= 99:
        return 4
    return 5


PLURAL_RULES: Mapping[PluralRule, Callable[[Count], int]] = {
    PluralRule.ENGLISH: _english,
    PluralRule.FRENCH: _french,
    PluralRule.RUSSIAN: _russian,
    PluralRule.CZECH: _czech,
    PluralRule.POLISH: _polish,
    PluralRule.ICELANDIC: _icelandic,
    PluralRule.CHINESE: _chinese,
    PluralRule.ARABIC: _arabic,
}

# Rule family per language. Region-specific entries ("pt-br") take precedence
# over their base language.
_FAMILY_LANGUAGES: Mapping[PluralRule, tuple[str, ...]] = {
    PluralRule.ENGLISH: (
        "da", "de", "en", "es", "fi", "el", "he", "hu", "it", "nl", "no", "pt", "sv", "br",
    ),
    PluralRule.CHINESE: ("fa", "id", "ja", "ko", "lo", "ms", "th", "tr", "zh", "jp"),
    PluralRule.FRENCH: ("fr", "tl", "pt-br"),
    PluralRule.RUSSIAN: ("hr", "ru", "uk", "uz"),
    PluralRule.CZECH: ("cs", "sk"),
    PluralRule.ICELANDIC: ("is",),
    PluralRule.POLISH: ("pl",),
    PluralRule.ARABIC: ("ar",),
}

LANGUAGE_RULES: Mapping[str, PluralRule] = {
    normalize_locale(language): rule
    for rule, languages in _FAMILY_LANGUAGES.items()
    for language in languages
}


class PluralEngine:
    """Selects plural word forms according to per-language rules.

    Unknown languages degrade to the default language's rule family; this is
    never an error. Each unresolved tag is reported once per engine.

    Example:
        >>> engine = PluralEngine()
        >>> engine.select_form(1, ["apple", "apples"], "en")
        '1 apple'
        >>> engine.select_form(5, ["яблоко", "яблока", "яблок"], "ru")
        '5 яблок'
        >>> engine.select_form(3, [lambda n: f"{n}!"], "en")
        '3!'
    """

    __slots__ = ("_default_rule", "_rules", "_warned")

    def __init__(
        self,
        rules: Mapping[str, PluralRule] | None = None,
        *,
        default_language: str = DEFAULT_LANGUAGE,
    ) -> None:
        """Initialize engine.

        Args:
            rules: Language-to-family table (default: LANGUAGE_RULES)
            default_language: Language whose family is used for unknown tags
        """
        self._rules: dict[str, PluralRule] = {
            normalize_locale(language): rule
            for language, rule in (rules if rules is not None else LANGUAGE_RULES).items()
        }
        self._default_rule = self._rules.get(
            normalize_locale(default_language), PluralRule.ENGLISH
        )
        self._warned: set[str | tuple[PluralRule, int]] = set()

    def rule_for(self, language_code: str) -> PluralRule:
        """Resolve the rule family for a language tag.

        Looks up the full tag first, then its base language, then falls back
        to the default family (warning once per tag).
        """
        code = normalize_locale(language_code)
        rule = self._rules.get(code) or self._rules.get(base_language(code))
        if rule is not None:
            return rule

        if code not in self._warned:
            self._warned.add(code)
            logger.warning(
                "Unsupported plural language %r, falling back to %r rules",
                language_code,
                str(self._default_rule),
            )
        return self._default_rule

    def register(self, language_code: str, rule: PluralRule) -> None:
        """Assign a rule family to a language tag."""
        code = normalize_locale(language_code)
        self._rules[code] = rule
        self._warned.discard(code)

    def select_form(
        self,
        count: Count,
        forms: Sequence[Form],
        language_code: str = DEFAULT_LANGUAGE,
    ) -> str:
        """Select and render the word form for count.

        A literal form renders as "<count> <form>"; a callable form receives
        the raw count and returns the final string. When the rule needs more
        forms than were supplied the last form is used. No forms at all
        renders the count alone.

        Args:
            count: The number being described
            forms: Word forms in the family's order
            language_code: Language tag (any spelling)

        Returns:
            Rendered string
        """
        if not forms:
            return str(count)

        rule = self.rule_for(language_code)
        index = PLURAL_RULES[rule](abs(count))
        if index >= len(forms):
            clamp_key = (rule, len(forms))
            if clamp_key not in self._warned:
                self._warned.add(clamp_key)
                logger.warning(
                    "%r plural rules selected form %d but only %d form(s) supplied; "
                    "using the last form",
                    str(rule),
                    index,
                    len(forms),
                )
            index = len(forms) - 1

        form = forms[index]
        if callable(form):
            return form(count)
        return f"{count} {form}"

    def reset_warnings(self) -> None:
        """Forget which tags and clamps have already been reported."""
        self._warned.clear()


_default_engine = PluralEngine()


def get_default_engine() -> PluralEngine:
    """Return the engine shared by module-level pluralize()."""
    return _default_engine


def pluralize(count: Count, forms: Sequence[Form], language_code: str = DEFAULT_LANGUAGE) -> str:
    """Select a plural form using the shared default engine.

    Example:
        >>> pluralize(1, ["apple", "apples"], "en")
        '1 apple'
        >>> pluralize(5, ["apple", "apples"], "en")
        '5 apples'
    """
    return _default_engine.select_form(count, forms, language_code)
