"""Tests for the unified, tiered and frequency vocabulary providers."""

from __future__ import annotations

import asyncio

import pytest

from wordgloss.exceptions import (
    MissingCollaboratorError,
    ProviderNotInitializedError,
    VocabularyLoadError,
)
from wordgloss.vocabulary import (
    FrequencyMatchOptions,
    FrequencyVocabularyProvider,
    InMemoryVocabularyLoader,
    MatchOptions,
    TagMatchMode,
    TierMatchOptions,
    TieredVocabularyProvider,
    UnifiedVocabularyProvider,
)

pytestmark = pytest.mark.vocabulary


def _initialized(provider):
    asyncio.run(provider.initialize())
    return provider


class TestUnifiedProvider:
    def test_any_mode_with_target_tags(self, vocabulary_loader):
        provider = _initialized(UnifiedVocabularyProvider(vocabulary_loader))
        options = MatchOptions(target_tags=("cet6", "toefl"), mode=TagMatchMode.ANY)

        assert provider.should_annotate("apple", options) is False
        assert provider.should_annotate("abandon", options) is True
        assert provider.should_annotate("aberration", options) is False
        assert provider.should_annotate("nonexistent", options) is False
        assert provider.should_annotate("tacit", options) is True

    def test_empty_target_tags_requires_any_tag(self, vocabulary_loader):
        provider = _initialized(UnifiedVocabularyProvider(vocabulary_loader))

        assert provider.should_annotate("aberration", MatchOptions()) is True
        assert provider.should_annotate("untagged", MatchOptions()) is False

    def test_base_only_words_need_include_base(self, vocabulary_loader):
        provider = _initialized(UnifiedVocabularyProvider(vocabulary_loader))

        assert provider.should_annotate("apple", MatchOptions(target_tags=("cet4",))) is False
        assert (
            provider.should_annotate("apple", MatchOptions(target_tags=("cet4",), include_base=True))
            is True
        )

    def test_min_star_rating_is_checked_first(self, vocabulary_loader):
        provider = _initialized(UnifiedVocabularyProvider(vocabulary_loader))
        options = MatchOptions(target_tags=("cet6",), min_star_rating=4)

        assert provider.should_annotate("abandon", options) is False
        assert provider.should_annotate("abandon", MatchOptions(min_star_rating=3)) is True

    def test_all_and_exact_modes(self, vocabulary_loader):
        provider = _initialized(UnifiedVocabularyProvider(vocabulary_loader))

        all_options = MatchOptions(target_tags=("cet4", "cet6"), mode="all")
        assert provider.should_annotate("abandon", all_options) is True
        assert provider.should_annotate("tacit", all_options) is False

        exact = MatchOptions(target_tags=("cet6", "cet4"), mode=TagMatchMode.EXACT)
        assert provider.should_annotate("abandon", exact) is True
        assert provider.should_annotate("abandon", MatchOptions(target_tags=("cet6",), mode="exact")) is False

    def test_accepts_camel_case_mapping(self, vocabulary_loader):
        provider = _initialized(UnifiedVocabularyProvider(vocabulary_loader))
        options = {"targetTags": ["CET6"], "mode": "ANY", "includeBase": False, "minCollins": 0}

        assert provider.should_annotate("  Abandon ", options) is True

    def test_queries_before_initialize_fail_fast(self, vocabulary_loader):
        provider = UnifiedVocabularyProvider(vocabulary_loader)

        with pytest.raises(ProviderNotInitializedError):
            provider.should_annotate("apple")
        with pytest.raises(ProviderNotInitializedError):
            provider.get_metadata("apple")
        with pytest.raises(ProviderNotInitializedError):
            provider.batch_check(["apple"])

    def test_advanced_tier_is_loaded_on_demand(self, vocabulary_loader):
        provider = _initialized(UnifiedVocabularyProvider(vocabulary_loader))
        assert provider.get_metadata("obdurate") is None
        assert provider.loaded_tiers == ["core"]

        asyncio.run(provider.ensure_advanced_loaded())
        asyncio.run(provider.ensure_advanced_loaded())

        assert provider.has_tag("obdurate", "gre")
        assert provider.loaded_tiers == ["core", "advanced"]
        assert vocabulary_loader.calls.count("advanced") == 1

    def test_metadata_and_stats(self, vocabulary_loader):
        provider = _initialized(UnifiedVocabularyProvider(vocabulary_loader))

        entry = provider.get_metadata("tacit")
        assert entry is not None
        assert entry.tags == frozenset({"toefl"})
        assert entry.star_rating == 2
        assert entry.oxford is True
        assert provider.tags_for("abandon") == {"cet4", "cet6"}

        stats = provider.stats()
        assert stats["word_count"] == 5
        assert stats["tag_stats"]["cet4"] == 2
        assert "target_tags" in provider.supported_options()

    def test_load_failure_is_fatal_and_leaves_provider_unusable(self):
        loader = InMemoryVocabularyLoader({"core": {"apple": {"tags": ["cet4"]}}}, failing_tiers=["core"])
        provider = UnifiedVocabularyProvider(loader)

        with pytest.raises(VocabularyLoadError) as excinfo:
            asyncio.run(provider.initialize())

        assert excinfo.value.tier == "core"
        assert provider.initialized is False
        with pytest.raises(ProviderNotInitializedError):
            provider.should_annotate("apple")

    def test_initialize_is_idempotent(self, vocabulary_loader):
        provider = UnifiedVocabularyProvider(vocabulary_loader)

        async def _twice():
            await asyncio.gather(provider.initialize(), provider.initialize())

        asyncio.run(_twice())

        assert vocabulary_loader.calls.count("core") == 1

    def test_missing_loader_fails_construction(self):
        with pytest.raises(MissingCollaboratorError):
            UnifiedVocabularyProvider(None)  # type: ignore[arg-type]


class TestTieredProvider:
    def test_above_mode_excludes_base_level(self, vocabulary_loader):
        provider = _initialized(TieredVocabularyProvider(vocabulary_loader))
        options = TierMatchOptions(levels=("cet4",), mode="above")

        assert provider.should_annotate("apple", options) is False
        assert provider.should_annotate("abandon", options) is True
        assert provider.should_annotate("zeal", options) is True
        assert provider.should_annotate("missing", options) is False

    def test_include_base_and_other_modes(self, vocabulary_loader):
        provider = _initialized(TieredVocabularyProvider(vocabulary_loader))

        assert provider.should_annotate(
            "apple", TierMatchOptions(levels=("cet4",), mode="exact", include_base=True)
        )
        assert provider.should_annotate("lexicon", TierMatchOptions(levels=("tem4",), mode="exact"))
        assert not provider.should_annotate("zeal", TierMatchOptions(levels=("tem4",), mode="below"))
        assert provider.should_annotate("abandon", TierMatchOptions(levels=("tem4",), mode="below"))

    def test_any_target_level_may_match(self, vocabulary_loader):
        provider = _initialized(TieredVocabularyProvider(vocabulary_loader))
        options = TierMatchOptions(levels=("tem8", "cet6"), mode="exact")

        assert provider.should_annotate("abandon", options)
        assert provider.should_annotate("zeal", options)
        assert not provider.should_annotate("lexicon", options)

    def test_level_counts(self, vocabulary_loader):
        provider = _initialized(TieredVocabularyProvider(vocabulary_loader))

        assert provider.stats()["level_counts"] == {"cet4": 1, "cet6": 1, "tem4": 1, "tem8": 1}


class TestFrequencyProvider:
    def test_below_mode_annotates_rare_words(self, vocabulary_loader):
        provider = _initialized(FrequencyVocabularyProvider(vocabulary_loader))
        options = FrequencyMatchOptions(threshold=5000, mode="below")

        assert provider.should_annotate("rare", options) is True
        assert provider.should_annotate("common", options) is False
        assert provider.should_annotate("norank", options) is True
        assert provider.should_annotate("never-seen", options) is True

    def test_above_mode_annotates_common_words(self, vocabulary_loader):
        provider = _initialized(FrequencyVocabularyProvider(vocabulary_loader))
        options = FrequencyMatchOptions(threshold=5000, mode="above")

        assert provider.should_annotate("rare", options) is False
        assert provider.should_annotate("common", options) is True

    def test_rank_range_and_threshold_validation(self, vocabulary_loader):
        provider = _initialized(FrequencyVocabularyProvider(vocabulary_loader))

        assert provider.stats()["rank_range"] == {"min": 100, "max": 10000}
        with pytest.raises(ValueError):
            FrequencyMatchOptions(threshold=0)

    def test_batch_check_normalizes_and_deduplicates(self, vocabulary_loader):
        provider = _initialized(FrequencyVocabularyProvider(vocabulary_loader))

        result = provider.batch_check(["Rare", "rare", "COMMON"], {"threshold": 5000})

        assert result == {"rare": True, "common": False}
