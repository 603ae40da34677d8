"""Vocabulary provider implementations."""

from .base import VocabularyProvider
from .frequency import FrequencyVocabularyProvider
from .tiered import TieredVocabularyProvider
from .unified import UnifiedVocabularyProvider

__all__ = [
    "FrequencyVocabularyProvider",
    "TieredVocabularyProvider",
    "UnifiedVocabularyProvider",
    "VocabularyProvider",
]
