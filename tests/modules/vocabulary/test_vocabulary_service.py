"""Tests for the cache-through vocabulary service."""

from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

import pytest

from wordgloss.cache import TTLCache
from wordgloss.exceptions import NoActiveProviderError, UnknownProviderError
from wordgloss.vocabulary import (
    FrequencyVocabularyProvider,
    MatchOptions,
    TieredVocabularyProvider,
    UnifiedVocabularyProvider,
    VocabularyService,
)

pytestmark = pytest.mark.vocabulary

CET6_OR_TOEFL = MatchOptions(target_tags=("cet6", "toefl"))


@pytest.fixture
def service(vocabulary_loader):
    service = VocabularyService(max_cache_size=50)
    service.register_provider(UnifiedVocabularyProvider(vocabulary_loader))
    service.register_provider(TieredVocabularyProvider(vocabulary_loader))
    service.register_provider(FrequencyVocabularyProvider(vocabulary_loader))
    yield service
    service.close()


def test_queries_without_active_provider_raise(service):
    with pytest.raises(NoActiveProviderError):
        service.should_annotate("apple")
    with pytest.raises(NoActiveProviderError):
        service.batch_check(["apple"])
    assert service.stats() is None


def test_unknown_provider_name(service):
    with pytest.raises(UnknownProviderError) as excinfo:
        asyncio.run(service.set_active_provider("oxford"))

    assert isinstance(excinfo.value, KeyError)
    assert "oxford" in str(excinfo.value)


def test_set_active_provider_initializes_lazily(service, vocabulary_loader):
    assert vocabulary_loader.calls == []

    asyncio.run(service.set_active_provider("unified", CET6_OR_TOEFL))

    assert vocabulary_loader.calls == ["core"]
    assert service.active_provider.initialized
    assert service.should_annotate("abandon") is True


def test_batch_check_only_sends_misses_to_provider(service):
    asyncio.run(service.set_active_provider("unified", CET6_OR_TOEFL))
    provider = service.active_provider

    with patch.object(provider, "batch_check", wraps=provider.batch_check) as spy:
        first = service.batch_check(["apple", "Abandon", "apple"])
        second = service.batch_check(["abandon", "tacit"])

    assert first == {"apple": False, "abandon": True}
    assert second == {"abandon": True, "tacit": True}
    assert spy.call_count == 2
    assert list(spy.call_args_list[0].args[0]) == ["apple", "abandon"]
    assert list(spy.call_args_list[1].args[0]) == ["tacit"]


def test_should_annotate_is_cached(service):
    asyncio.run(service.set_active_provider("unified", CET6_OR_TOEFL))
    provider = service.active_provider

    with patch.object(provider, "should_annotate", wraps=provider.should_annotate) as spy:
        assert service.should_annotate("abandon")
        assert service.should_annotate("ABANDON")

    assert spy.call_count == 1
    assert service.cache.stats().hits == 1


def test_changing_options_invalidates_cache(service):
    asyncio.run(service.set_active_provider("unified", CET6_OR_TOEFL))
    service.batch_check(["apple", "abandon"])
    assert service.cache.size == 2

    assert service.set_options(CET6_OR_TOEFL) is False
    assert service.cache.size == 2

    assert service.set_options({"targetTags": ["cet4"], "includeBase": True}) is True
    assert service.cache.size == 0
    assert service.should_annotate("apple") is True


def test_switching_provider_clears_cache(service):
    asyncio.run(service.set_active_provider("unified", CET6_OR_TOEFL))
    service.should_annotate("apple")

    asyncio.run(service.set_active_provider("frequency", {"threshold": 5000}))

    assert service.cache.size == 0
    assert service.should_annotate("rare") is True
    assert service.should_annotate("common") is False
    assert service.stats()["name"] == "frequency"


def test_combine_providers(service):
    async def _activate_all():
        for name in ("unified", "tiered", "frequency"):
            await service.get_provider(name).initialize()

    asyncio.run(_activate_all())
    options = {
        "unified": {"targetTags": ["cet6"]},
        "tiered": {"levels": ["tem8"], "mode": "exact"},
        "frequency": {"threshold": 5000},
    }

    either = service.combine_providers(["unified", "tiered"], "or", options)
    both = service.combine_providers(["unified", "frequency"], "AND", options)

    assert either("abandon") and either("zeal")
    assert not either("apple")
    assert both("abandon")
    assert not both("common")
    with pytest.raises(ValueError):
        service.combine_providers(["unified"], "XOR")


def test_shrinking_cache_clears_it(service):
    asyncio.run(service.set_active_provider("unified", CET6_OR_TOEFL))
    service.batch_check(["apple", "abandon", "tacit"])

    service.set_max_cache_size(2)

    assert service.cache.size == 0
    assert service.stats()["max_cache_size"] == 2


def test_concurrent_queries_are_safe(service):
    asyncio.run(service.set_active_provider("unified", CET6_OR_TOEFL))
    words = ["apple", "abandon", "tacit", "aberration", "missing"] * 40

    with ThreadPoolExecutor(max_workers=8) as executor:
        results = list(executor.map(service.should_annotate, words))

    assert results[:5] == [False, True, True, False, False]
    assert results == results[:5] * 40
    assert service.cache.size == 5


def test_injected_empty_cache_is_used():
    cache = TTLCache(max_size=7, ttl=60, name="vocabulary")
    service = VocabularyService(cache=cache)

    assert len(cache) == 0
    assert service.cache is cache
    assert service.cache.max_size == 7
