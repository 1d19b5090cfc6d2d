"""English inflection helpers used to derive route and class names.

Resource names are turned into URL segments (``pluralize``), route
parameters (``singularize``) and client class names (``classify``).
The rule tables are applied first match wins.
"""

from __future__ import annotations

import re

PLURAL_RULES: list[tuple[str, str]] = [
    (r"(quiz)$", r"\1zes"),
    (r"^(oxen)$", r"\1"),
    (r"^(ox)$", r"\1en"),
    (r"^(m|l)ice$", r"\1ice"),
    (r"^(m|l)ouse$", r"\1ice"),
    (r"(matr|vert|ind)(?:ix|ex)$", r"\1ices"),
    (r"(x|ch|ss|sh)$", r"\1es"),
    (r"([^aeiouy]|qu)y$", r"\1ies"),
    (r"(hive)$", r"\1s"),
    (r"(?:([^f])fe|([lr])f)$", r"\1\2ves"),
    (r"sis$", "ses"),
    (r"([ti])a$", r"\1a"),
    (r"([ti])um$", r"\1a"),
    (r"(buffal|tomat)o$", r"\1oes"),
    (r"(bu)s$", r"\1ses"),
    (r"(alias|status)$", r"\1es"),
    (r"(octop|vir)i$", r"\1i"),
    (r"(octop|vir)us$", r"\1i"),
    (r"^(ax|test)is$", r"\1es"),
    (r"s$", "s"),
    (r"$", "s"),
]

SINGULAR_RULES: list[tuple[str, str]] = [
    (r"(database)s$", r"\1"),
    (r"(quiz)zes$", r"\1"),
    (r"(matr)ices$", r"\1ix"),
    (r"(vert|ind)ices$", r"\1ex"),
    (r"^(ox)en", r"\1"),
    (r"(alias|status)(es)?$", r"\1"),
    (r"(octop|vir)(us|i)$", r"\1us"),
    (r"^(a)x[ie]s$", r"\1xis"),
    (r"(cris|test)(is|es)$", r"\1is"),
    (r"(shoe)s$", r"\1"),
    (r"(o)es$", r"\1"),
    (r"(bus)(es)?$", r"\1"),
    (r"^(m|l)ice$", r"\1ouse"),
    (r"(x|ch|ss|sh)es$", r"\1"),
    (r"(m)ovies$", r"\1ovie"),
    (r"(s)eries$", r"\1eries"),
    (r"([^aeiouy]|qu)ies$", r"\1y"),
    (r"([lr])ves$", r"\1f"),
    (r"(tive)s$", r"\1"),
    (r"(hive)s$", r"\1"),
    (r"([^f])ves$", r"\1fe"),
    (r"(^analy)(sis|ses)$", r"\1sis"),
    (r"((a)naly|(b)a|(d)iagno|(p)arenthe|(p)rogno|(s)ynop|(t)he)(sis|ses)$", r"\1sis"),
    (r"([ti])a$", r"\1um"),
    (r"(n)ews$", r"\1ews"),
    (r"(ss)$", r"\1"),
    (r"s$", ""),
]

IRREGULARS: dict[str, str] = {
    "person": "people",
    "man": "men",
    "woman": "women",
    "child": "children",
    "sex": "sexes",
    "move": "moves",
    "zombie": "zombies",
}

UNCOUNTABLES: frozenset[str] = frozenset(
    {"equipment", "information", "rice", "money", "species", "series", "fish", "sheep", "jeans", "police"}
)

_COMPILED_PLURALS = [(re.compile(pattern, re.IGNORECASE), repl) for pattern, repl in PLURAL_RULES]
_COMPILED_SINGULARS = [(re.compile(pattern, re.IGNORECASE), repl) for pattern, repl in SINGULAR_RULES]
_IRREGULAR_SINGULARS = {plural: singular for singular, plural in IRREGULARS.items()}


def _match_case(source: str, target: str) -> str:
    if source[:1].isupper():
        return target[:1].upper() + target[1:]
    return target


def _apply(rules: list[tuple[re.Pattern[str], str]], word: str) -> str:
    for pattern, repl in rules:
        if pattern.search(word):
            return pattern.sub(repl, word, count=1)
    return word


def _split_last(word: str) -> tuple[str, str]:
    """Split ``word`` so only its last underscored segment is inflected."""
    head, sep, tail = word.rpartition("_")
    return head + sep, tail


def pluralize(word: str) -> str:
    """Return the plural form of ``word``; already plural words are returned as-is."""
    if not word:
        return word
    head, tail = _split_last(word)
    lowered = tail.lower()
    if lowered in UNCOUNTABLES:
        return word
    if lowered in IRREGULARS:
        return head + _match_case(tail, IRREGULARS[lowered])
    if lowered in _IRREGULAR_SINGULARS:
        return word
    return head + _apply(_COMPILED_PLURALS, tail)


def singularize(word: str) -> str:
    """Return the singular form of ``word``; already singular words are returned as-is."""
    if not word:
        return word
    head, tail = _split_last(word)
    lowered = tail.lower()
    if lowered in UNCOUNTABLES:
        return word
    if lowered in _IRREGULAR_SINGULARS:
        return head + _match_case(tail, _IRREGULAR_SINGULARS[lowered])
    if lowered in IRREGULARS:
        return word
    return head + _apply(_COMPILED_SINGULARS, tail)


def classify(word: str) -> str:
    """Convert a lowercase, underscored name to a proper cased class name.

    e.g. ``"my_table"`` => ``"MyTable"``
    """
    parts = re.split(r"[_\s-]+", word.strip())
    return "".join(part[:1].upper() + part[1:] for part in parts if part)
