"""Word extraction and normalisation for annotation scans.

Only Latin-letter words are candidates; internal hyphens and apostrophes
keep compounds such as ``well-known`` or ``don't`` together.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List

import regex

WORD_PATTERN = regex.compile(r"\b[a-zA-Z]+(?:[-'][a-zA-Z]+)*\b")


@dataclass(frozen=True, slots=True)
class WordMatch:
    """A word-shaped substring located inside a piece of text."""

    word: str
    normalized: str
    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length


def normalize_word(word: str) -> str:
    """Normalize a word for vocabulary lookup.

    Args:
        word: Word as it appears in the text.

    Returns:
        NFC-normalised, lower-cased form without surrounding whitespace.
    """
    if not word:
        return ""
    return unicodedata.normalize("NFC", word).strip().lower()


def iter_word_matches(text: str) -> Iterator[WordMatch]:
    """Yield every candidate word in ``text`` in document order."""

    if not text:
        return
    for match in WORD_PATTERN.finditer(text):
        word = match.group(0)
        yield WordMatch(
            word=word,
            normalized=normalize_word(word),
            offset=match.start(),
            length=len(word),
        )


def extract_unique_words(texts: Iterable[str]) -> List[str]:
    """Return the normalised words of ``texts`` in first-seen order."""

    seen: Dict[str, None] = {}
    for text in texts:
        for match in iter_word_matches(text):
            seen.setdefault(match.normalized, None)
    return list(seen)


__all__ = [
    "WORD_PATTERN",
    "WordMatch",
    "extract_unique_words",
    "iter_word_matches",
    "normalize_word",
]
