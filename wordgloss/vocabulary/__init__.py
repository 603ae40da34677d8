"""Vocabulary matching: data models, loaders, providers and the service."""

from .loader import InMemoryVocabularyLoader, JsonVocabularyLoader, VocabularyLoader
from .models import (
    FrequencyMatchOptions,
    FrequencyMode,
    MatchOptions,
    ProviderOptions,
    TagMatchMode,
    TierMatchOptions,
    TierMode,
    VocabularyEntry,
)
from .providers import (
    FrequencyVocabularyProvider,
    TieredVocabularyProvider,
    UnifiedVocabularyProvider,
    VocabularyProvider,
)
from .service import VocabularyService

__all__ = [
    "FrequencyMatchOptions",
    "FrequencyMode",
    "FrequencyVocabularyProvider",
    "InMemoryVocabularyLoader",
    "JsonVocabularyLoader",
    "MatchOptions",
    "ProviderOptions",
    "TagMatchMode",
    "TierMatchOptions",
    "TierMode",
    "TieredVocabularyProvider",
    "UnifiedVocabularyProvider",
    "VocabularyEntry",
    "VocabularyLoader",
    "VocabularyProvider",
    "VocabularyService",
]
