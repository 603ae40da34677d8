"""Text utilities: tokenisation and context extraction."""

from .context import ContextExtractor, extract_context, sentence_boundaries
from .tokenizer import WORD_PATTERN, WordMatch, extract_unique_words, iter_word_matches, normalize_word

__all__ = [
    "ContextExtractor",
    "WORD_PATTERN",
    "WordMatch",
    "extract_context",
    "extract_unique_words",
    "iter_word_matches",
    "normalize_word",
    "sentence_boundaries",
]
