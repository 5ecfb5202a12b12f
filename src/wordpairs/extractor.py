"""Extract German article+noun pairs and bare words from free-form text."""
from __future__ import annotations

import logging
import re
import sys
import unicodedata
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, FrozenSet, Iterable, List, Optional, Pattern, Sequence, Set, Tuple

LOGGER = logging.getLogger(__name__)

DEFINITE_ARTICLES = ("der", "die", "das", "den", "dem", "des")
INDEFINITE_ARTICLES = ("ein", "eine", "einen", "einem", "einer", "eines")
NEGATING_ARTICLES = ("kein", "keine", "keinen", "keinem", "keiner", "keines")

DETERMINER_VARIANTS: Dict[str, FrozenSet[str]] = {
    "definite": frozenset(DEFINITE_ARTICLES),
    "indefinite": frozenset(DEFINITE_ARTICLES + INDEFINITE_ARTICLES),
    "full": frozenset(DEFINITE_ARTICLES + INDEFINITE_ARTICLES + NEGATING_ARTICLES),
}
DEFAULT_VARIANT = "full"

LETTER_CATEGORIES = {"Lu", "Ll", "Lt", "Lm", "Lo"}
MARK_CATEGORIES = {"Mn"}


@lru_cache(maxsize=None)
def _category_class(categories: FrozenSet[str]) -> str:
    # Collapse every codepoint in the given categories into a compact range set.
    ranges: List[Tuple[int, int]] = []
    start = None
    previous = None
    for codepoint in range(sys.maxunicode + 1):
        if unicodedata.category(chr(codepoint)) in categories:
            if start is None:
                start = codepoint
            previous = codepoint
            continue
        if start is not None:
            ranges.append((start, previous))
            start = None
    if start is not None:
        ranges.append((start, previous))
    parts = []
    for low, high in ranges:
        if low == high:
            parts.append(re.escape(chr(low)))
        else:
            parts.append(f"{re.escape(chr(low))}-{re.escape(chr(high))}")
    return "".join(parts)


@lru_cache(maxsize=None)
def default_word_pattern() -> Pattern[str]:
    letters = _category_class(frozenset(LETTER_CATEGORIES))
    marks = _category_class(frozenset(MARK_CATEGORIES))
    return re.compile(f"[{letters}][{letters}{marks}\\-']*")


@dataclass(frozen=True)
class Entry:
    noun: str
    article: str = ""
    english: str = ""

    @property
    def display(self) -> str:
        if self.article:
            return f"{self.article} {self.noun}"
        return self.noun

    @property
    def key(self) -> Tuple[str, str]:
        return (self.article, self.noun)


@dataclass(frozen=True)
class ExtractorConfig:
    determiners: FrozenSet[str] = field(default_factory=lambda: DETERMINER_VARIANTS[DEFAULT_VARIANT])
    word_pattern: Optional[Pattern[str]] = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "determiners", frozenset(token.lower() for token in self.determiners)
        )

    @property
    def pattern(self) -> Pattern[str]:
        return self.word_pattern or default_word_pattern()


def config_for_variant(name: str) -> ExtractorConfig:
    try:
        determiners = DETERMINER_VARIANTS[name]
    except KeyError:
        known = ", ".join(sorted(DETERMINER_VARIANTS))
        raise ValueError(f"Unknown determiner variant {name!r} (expected one of: {known})") from None
    return ExtractorConfig(determiners=determiners)


DEFAULT_CONFIG = ExtractorConfig()


def tokenize(text: str, pattern: Optional[Pattern[str]] = None) -> List[str]:
    """Return the lowercased words of ``text`` in scan order."""
    word_pattern = pattern or default_word_pattern()
    return [match.group(0).lower() for match in word_pattern.finditer(text)]


def pair_tokens(tokens: Sequence[str], determiners: Iterable[str]) -> List[Entry]:
    """Join each determiner with the token after it.

    A determiner consumes its successor, which is never considered again. A
    determiner with nothing after it is kept as a bare word.
    """
    articles: Set[str] = set(determiners)
    entries: List[Entry] = []
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if token in articles and index + 1 < len(tokens):
            entries.append(Entry(noun=tokens[index + 1], article=token))
            index += 2
        else:
            entries.append(Entry(noun=token))
            index += 1
    return entries


def dedupe_entries(entries: Iterable[Entry]) -> List[Entry]:
    seen: Set[Tuple[str, str]] = set()
    unique: List[Entry] = []
    for entry in entries:
        if entry.key in seen:
            continue
        seen.add(entry.key)
        unique.append(entry)
    return unique


def extract(text: object, config: ExtractorConfig = DEFAULT_CONFIG) -> List[Entry]:
    if not isinstance(text, str) or not text:
        return []
    tokens = tokenize(text, config.pattern)
    entries = dedupe_entries(pair_tokens(tokens, config.determiners))
    LOGGER.debug("Extracted %s unique entries from %s tokens", len(entries), len(tokens))
    return entries
