from __future__ import annotations

from typing import Any, Dict

import pytest

from wordgloss.config import reset_settings
from wordgloss.config.constants import ADVANCED_TIER, CORE_TIER, FREQUENCY_TIER, LEGACY_TIER
from wordgloss.vocabulary import InMemoryVocabularyLoader

from tests.helpers.doubles import FakeClock

CORE_WORDS: Dict[str, Dict[str, Any]] = {
    "apple": {"tags": ["cet4"], "frequency": 1200, "collins": 5},
    "abandon": {"tags": ["cet4", "cet6"], "frequency": 3000, "collins": 3},
    "aberration": {"tags": ["gre"], "collins": 1},
    "tacit": {"tags": ["toefl"], "collins": 2, "oxford": 1},
    "untagged": {"tags": []},
}

ADVANCED_WORDS: Dict[str, Dict[str, Any]] = {
    "obdurate": {"tags": ["gre"], "collins": 1},
}

FREQUENCY_WORDS: Dict[str, Dict[str, Any]] = {
    "rare": {"rank": 10000, "tier": "top20000"},
    "common": {"rank": 100, "tier": "top1000"},
    "norank": {"tier": "top1000"},
}

LEGACY_WORDS: Dict[str, Dict[str, Any]] = {
    "apple": {"level": "cet4"},
    "abandon": {"level": "cet6"},
    "lexicon": {"level": "tem4"},
    "zeal": {"level": "tem8"},
}


@pytest.fixture
def vocabulary_loader() -> InMemoryVocabularyLoader:
    return InMemoryVocabularyLoader(
        {
            CORE_TIER: CORE_WORDS,
            ADVANCED_TIER: ADVANCED_WORDS,
            FREQUENCY_TIER: FREQUENCY_WORDS,
            LEGACY_TIER: LEGACY_WORDS,
        }
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch):
    for key in (
        "WORDGLOSS_MAX_CONCURRENCY",
        "WORDGLOSS_TARGET_LANG",
        "WORDGLOSS_VOCABULARY_PROVIDER",
        "WORDGLOSS_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield
    reset_settings()
