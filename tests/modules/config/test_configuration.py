"""Tests for layered configuration loading and the engine factory."""

from __future__ import annotations

import asyncio
import json

import pytest

from wordgloss.config import (
    AnnotatorSettings,
    apply_settings_updates,
    get_settings,
    load_configuration,
    load_environment_overrides,
)
from wordgloss.document import InMemoryDocument
from wordgloss.engine import build_engine, provider_options
from wordgloss.exceptions import ConfigurationError
from wordgloss.scanner import ScanStatus
from wordgloss.vocabulary import (
    FrequencyMatchOptions,
    MatchOptions,
    TagMatchMode,
    TierMatchOptions,
)

pytestmark = pytest.mark.config


def test_defaults():
    settings = load_configuration()

    assert settings.source_lang == "en"
    assert settings.target_lang == "zh-CN"
    assert settings.vocabulary_provider == "unified"
    assert settings.max_concurrency == 4
    assert settings.context_max_length == 300
    assert settings.translation_cache_size == 100
    assert get_settings() is settings


def test_file_then_overrides_then_environment(tmp_path, monkeypatch):
    config_path = tmp_path / "wordgloss.json"
    config_path.write_text(
        json.dumps(
            {
                "target_lang": "ja",
                "max_concurrency": 2,
                "match_options": {"targetTags": "cet6, TOEFL", "mode": "ALL", "minCollins": 2},
            }
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("WORDGLOSS_MAX_CONCURRENCY", "8")

    settings = load_configuration(config_path, overrides={"match_options": {"includeBase": True}})

    assert settings.target_lang == "ja"
    assert settings.max_concurrency == 8
    assert settings.match_options.target_tags == ["cet6", "toefl"]
    assert settings.match_options.mode == "all"
    assert settings.match_options.include_base is True
    assert settings.match_options.min_star_rating == 2


@pytest.mark.parametrize(
    "overrides",
    [
        {"vocabulary_provider": "oxford"},
        {"max_concurrency": 0},
        {"max_concurrency": 64},
        {"match_options": {"mode": "some"}},
        {"match_options": {"minStarRating": 9}},
    ],
)
def test_invalid_values_raise_configuration_error(overrides):
    with pytest.raises(ConfigurationError):
        load_configuration(overrides=overrides)


def test_missing_or_malformed_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_configuration(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("[1, 2", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_configuration(broken)


def test_invalid_environment_is_ignored(monkeypatch):
    monkeypatch.setenv("WORDGLOSS_MAX_CONCURRENCY", "many")

    assert load_environment_overrides() == {}
    assert get_settings().max_concurrency == 4


def test_apply_settings_updates_revalidates():
    settings = AnnotatorSettings()

    updated = apply_settings_updates(settings, {"vocabulary_provider": " Frequency "})

    assert updated.vocabulary_provider == "frequency"
    assert apply_settings_updates(settings, {}) is settings


def test_provider_options_follow_the_selected_provider():
    unified = provider_options(
        AnnotatorSettings(match_options={"targetTags": ["gre"], "mode": "exact"})
    )
    tiered = provider_options(
        AnnotatorSettings(vocabulary_provider="tiered", tier_levels=["tem4"], tier_mode="below")
    )
    frequency = provider_options(
        AnnotatorSettings(vocabulary_provider="frequency", frequency_threshold=8000)
    )

    assert unified == MatchOptions(target_tags=("gre",), mode=TagMatchMode.EXACT)
    assert tiered == TierMatchOptions(levels=("tem4",), mode="below")
    assert frequency == FrequencyMatchOptions(threshold=8000)


def test_engine_scans_with_debug_translations(vocabulary_loader):
    settings = load_configuration(
        overrides={
            "match_options": {"targetTags": ["cet4"], "includeBase": True},
            "max_concurrency": 2,
            "cache_auto_cleanup": False,
        }
    )
    engine = build_engine(settings, loader=vocabulary_loader)
    document = InMemoryDocument(["An apple a day."])

    async def _run():
        await engine.activate()
        return await engine.scanner.scan_page(document)

    try:
        result = asyncio.run(_run())
    finally:
        engine.close()

    assert result.status is ScanStatus.COMPLETED
    assert result.annotations_applied == 1
    assert document.annotations()[0].annotation_text == "/ˈæpl/ 苹果"
    assert engine.translation.active_provider_name == "debug"
    assert sorted(engine.vocabulary.provider_names()) == ["frequency", "tiered", "unified"]
    assert engine.scanner.pool.max_workers == 2


def test_engine_reads_vocabulary_directory(tmp_path):
    (tmp_path / "vocabulary-frequency.json").write_text(
        json.dumps({"words": {"serendipity": {"rank": 15000}, "the": {"rank": 1}}}),
        encoding="utf-8",
    )
    settings = load_configuration(
        overrides={
            "vocabulary_dir": str(tmp_path),
            "vocabulary_provider": "frequency",
            "cache_auto_cleanup": False,
        }
    )
    engine = build_engine(settings)

    try:
        asyncio.run(engine.activate())
        flags = engine.vocabulary.batch_check(["serendipity", "the"])
    finally:
        engine.close()

    assert flags == {"serendipity": True, "the": False}


def test_engine_applies_vocabulary_cache_settings(vocabulary_loader):
    settings = load_configuration(
        overrides={
            "vocabulary_cache_size": 17,
            "vocabulary_cache_ttl_seconds": 3,
            "cache_auto_cleanup": True,
        }
    )
    engine = build_engine(settings, loader=vocabulary_loader)
    cache = engine.vocabulary.cache

    try:
        assert cache.max_size == 17
        assert cache.ttl == 3.0
        assert cache.auto_cleanup_running
    finally:
        engine.close()

    assert not cache.auto_cleanup_running
