"""Sentence-aware context windows for translation requests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import regex

from wordgloss.config.constants import CONTEXT_MAX_LENGTH, WORD_BOUNDARY_SEARCH_LENGTH

SENTENCE_END_PATTERN = regex.compile(r"[.!?。！？；;]\s*")
_BOUNDARY_PATTERN = regex.compile(r"[\s\-,;:.!?。！？；，、]")
_CJK_PATTERN = regex.compile(r"\p{Han}")


def sentence_boundaries(text: str) -> List[int]:
    """Return sentence start offsets, always including ``0`` and ``len(text)``."""

    boundaries = [0]
    boundaries.extend(match.end() for match in SENTENCE_END_PATTERN.finditer(text))
    boundaries.append(len(text))
    return boundaries


def _is_break(char: str) -> bool:
    return bool(_BOUNDARY_PATTERN.match(char) or _CJK_PATTERN.match(char))


def _splits_word(text: str, position: int) -> bool:
    """Return whether cutting ``text`` at ``position`` lands inside a word."""

    if position <= 0 or position >= len(text):
        return False
    return not (_is_break(text[position - 1]) or _is_break(text[position]))


@dataclass(slots=True)
class ContextExtractor:
    """Select a bounded window of text around a target phrase.

    The window prefers whole sentences: the sentence holding the target,
    then one preceding and one following sentence while the budget allows.
    Sentences longer than the budget fall back to a character window that
    never cuts a word in half.
    """

    max_length: int = CONTEXT_MAX_LENGTH
    boundary_search: int = WORD_BOUNDARY_SEARCH_LENGTH

    def extract(
        self,
        full_text: str,
        target_text: str,
        target_offset: Optional[int] = None,
        max_length: Optional[int] = None,
    ) -> str:
        """Return the context for ``target_text`` inside ``full_text``.

        ``target_offset`` pins a specific occurrence; when it does not point at
        ``target_text`` the first occurrence is used instead. If the target
        cannot be found the leading ``max_length`` characters are returned.
        """
        limit = self.max_length if max_length is None else max_length
        if not full_text or not target_text:
            return ""

        index = self._locate(full_text, target_text, target_offset)
        if index < 0:
            return full_text[:limit].strip()
        return self._sentence_context(full_text, index, len(target_text), limit)

    @staticmethod
    def _locate(full_text: str, target_text: str, target_offset: Optional[int]) -> int:
        if (
            target_offset is not None
            and 0 <= target_offset
            and full_text[target_offset : target_offset + len(target_text)] == target_text
        ):
            return target_offset
        return full_text.find(target_text)

    def _sentence_context(self, text: str, start: int, length: int, limit: int) -> str:
        end = start + length
        boundaries = sentence_boundaries(text)

        span: Tuple[int, int] = (0, len(text))
        position = 0
        for position in range(len(boundaries) - 1):
            if boundaries[position] <= start and end <= boundaries[position + 1]:
                span = (boundaries[position], boundaries[position + 1])
                break
        else:
            position = -1

        context = text[span[0] : span[1]].strip()
        if len(context) > limit:
            return self._character_context(text, start, length, limit)

        context_start, context_end = span
        if position > 0:
            candidate = text[boundaries[position - 1] : context_end].strip()
            if len(candidate) <= limit:
                context_start = boundaries[position - 1]
                context = candidate
        if 0 <= position < len(boundaries) - 2:
            candidate = text[context_start : boundaries[position + 2]].strip()
            if len(candidate) <= limit:
                context = candidate
        return context

    def _character_context(self, text: str, start: int, length: int, limit: int) -> str:
        end = start + length
        if length >= limit:
            return text[start : start + limit].strip()

        available = limit - length
        before = available // 2
        after = available - before

        context_start = max(0, start - before)
        steps = 0
        while _splits_word(text, context_start) and context_start < start:
            if steps >= self.boundary_search:
                context_start = start
                break
            context_start += 1
            steps += 1

        context_end = min(len(text), end + after)
        steps = 0
        while _splits_word(text, context_end) and context_end > end:
            if steps >= self.boundary_search:
                context_end = end
                break
            context_end -= 1
            steps += 1

        return text[context_start:context_end].strip()


def extract_context(
    full_text: str,
    target_text: str,
    target_offset: Optional[int] = None,
    max_length: int = CONTEXT_MAX_LENGTH,
) -> str:
    """Functional shortcut for :meth:`ContextExtractor.extract`."""

    return ContextExtractor(max_length=max_length).extract(full_text, target_text, target_offset)


__all__ = [
    "ContextExtractor",
    "SENTENCE_END_PATTERN",
    "extract_context",
    "sentence_boundaries",
]
