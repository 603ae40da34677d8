"""Shared constants for the configuration package."""
from __future__ import annotations

from types import MappingProxyType

DEFAULT_SOURCE_LANG = "en"
DEFAULT_TARGET_LANG = "zh-CN"

CONTEXT_MAX_LENGTH = 300
WORD_BOUNDARY_SEARCH_LENGTH = 20

DEFAULT_CACHE_SIZE = 100
DEFAULT_VOCABULARY_CACHE_SIZE = 1000
CACHE_TTL_SECONDS = 30 * 60
CACHE_CLEANUP_INTERVAL_SECONDS = 5 * 60
MIN_TRANSLATION_CACHE_SIZE = 10
MAX_TRANSLATION_CACHE_SIZE = 1000

DEFAULT_MAX_CONCURRENCY = 4
MAX_CONCURRENCY_LIMIT = 16

DEFAULT_VOCABULARY_PROVIDER = "unified"
DEFAULT_TRANSLATION_PROVIDER = "debug"
DEFAULT_VOCABULARY_DIR = "vocabulary"
VALID_VOCABULARY_PROVIDERS = frozenset({"unified", "tiered", "frequency"})

CORE_TIER = "core"
ADVANCED_TIER = "advanced"
FREQUENCY_TIER = "frequency"
LEGACY_TIER = "cet-combined"

# Words carrying only these tags are filtered out unless include_base is set.
BASE_TAGS = frozenset({"cet4"})
KNOWN_TAGS = ("cet4", "cet6", "ky", "gk", "zk", "toefl", "ielts", "gre")

# Ordinal priority for the legacy tier provider; higher means harder.
LEVEL_PRIORITY = MappingProxyType({"cet4": 1, "cet6": 2, "tem4": 3, "tem8": 4})
BASE_LEVEL = "cet4"

DEFAULT_FREQUENCY_THRESHOLD = 5000

ENV_PREFIX = "WORDGLOSS_"

__all__ = [
    "ADVANCED_TIER",
    "BASE_LEVEL",
    "BASE_TAGS",
    "CACHE_CLEANUP_INTERVAL_SECONDS",
    "CACHE_TTL_SECONDS",
    "CONTEXT_MAX_LENGTH",
    "CORE_TIER",
    "DEFAULT_CACHE_SIZE",
    "DEFAULT_FREQUENCY_THRESHOLD",
    "DEFAULT_MAX_CONCURRENCY",
    "DEFAULT_SOURCE_LANG",
    "DEFAULT_TARGET_LANG",
    "DEFAULT_TRANSLATION_PROVIDER",
    "DEFAULT_VOCABULARY_CACHE_SIZE",
    "DEFAULT_VOCABULARY_PROVIDER",
    "ENV_PREFIX",
    "FREQUENCY_TIER",
    "KNOWN_TAGS",
    "LEGACY_TIER",
    "LEVEL_PRIORITY",
    "MAX_CONCURRENCY_LIMIT",
    "MAX_TRANSLATION_CACHE_SIZE",
    "MIN_TRANSLATION_CACHE_SIZE",
    "VALID_VOCABULARY_PROVIDERS",
    "WORD_BOUNDARY_SEARCH_LENGTH",
]
