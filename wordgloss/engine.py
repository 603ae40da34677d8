"""Wire every component together from :class:`AnnotatorSettings`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import logging_manager as log_mgr
from .cache import TTLCache
from .config import AnnotatorSettings, get_settings
from .config.constants import DEFAULT_VOCABULARY_DIR
from .scanner import AnnotationScanner
from .text.context import ContextExtractor
from .translation import DebugTranslationProvider, TranslationService
from .vocabulary import (
    FrequencyMatchOptions,
    FrequencyVocabularyProvider,
    JsonVocabularyLoader,
    MatchOptions,
    ProviderOptions,
    TierMatchOptions,
    TieredVocabularyProvider,
    UnifiedVocabularyProvider,
    VocabularyLoader,
    VocabularyService,
)

logger = log_mgr.get_logger().getChild("engine")


def provider_options(settings: AnnotatorSettings) -> ProviderOptions:
    """Return the match options for the configured vocabulary provider."""

    if settings.vocabulary_provider == "tiered":
        return TierMatchOptions(
            levels=tuple(settings.tier_levels),
            mode=settings.tier_mode,
            include_base=settings.tier_include_base,
        )
    if settings.vocabulary_provider == "frequency":
        return FrequencyMatchOptions(
            threshold=settings.frequency_threshold, mode=settings.frequency_mode
        )
    match = settings.match_options
    return MatchOptions(
        target_tags=tuple(match.target_tags),
        mode=match.mode,
        include_base=match.include_base,
        min_star_rating=match.min_star_rating,
    )


@dataclass
class Engine:
    """Configured vocabulary service, translation service and scanner."""

    settings: AnnotatorSettings
    vocabulary: VocabularyService
    translation: TranslationService
    scanner: AnnotationScanner

    async def activate(self) -> None:
        """Initialise the configured vocabulary provider and make it active."""

        await self.vocabulary.set_active_provider(
            self.settings.vocabulary_provider, provider_options(self.settings)
        )

    def close(self) -> None:
        self.scanner.close()
        self.vocabulary.close()
        self.translation.close()


def build_engine(
    settings: Optional[AnnotatorSettings] = None,
    *,
    loader: Optional[VocabularyLoader] = None,
    configure_logging: bool = False,
) -> Engine:
    """Build an :class:`Engine` from ``settings`` (defaults to the active settings).

    ``loader`` replaces the JSON loader rooted at ``settings.vocabulary_dir``.
    Call :meth:`Engine.activate` before scanning.
    """

    settings = settings or get_settings()
    if configure_logging:
        log_mgr.setup_logging(
            log_mgr.resolve_log_level(settings.log_level), log_file=settings.log_file
        )

    if loader is None:
        loader = JsonVocabularyLoader(Path(settings.vocabulary_dir or DEFAULT_VOCABULARY_DIR))

    vocabulary = VocabularyService(
        cache=TTLCache(
            max_size=settings.vocabulary_cache_size,
            ttl=settings.vocabulary_cache_ttl_seconds,
            cleanup_interval=settings.cache_cleanup_interval_seconds,
            auto_cleanup=settings.cache_auto_cleanup,
            name="vocabulary",
        )
    )
    for provider in (
        UnifiedVocabularyProvider(loader),
        TieredVocabularyProvider(loader),
        FrequencyVocabularyProvider(loader),
    ):
        vocabulary.register_provider(provider)

    translation = TranslationService(
        cache_size=settings.translation_cache_size,
        cache_ttl=settings.translation_cache_ttl_seconds,
        cache_cleanup_interval=settings.cache_cleanup_interval_seconds,
        auto_cleanup=settings.cache_auto_cleanup and settings.translation_cache_size > 0,
    )
    translation.register_provider(DebugTranslationProvider())
    translation.set_active_provider(settings.translation_provider)

    scanner = AnnotationScanner(
        vocabulary,
        translation,
        source_lang=settings.source_lang,
        target_lang=settings.target_lang,
        max_concurrency=settings.max_concurrency,
        context_extractor=ContextExtractor(max_length=settings.context_max_length),
        fetch_translation=settings.fetch_translation,
    )
    logger.info(
        "Engine built",
        extra={
            "event": "engine.built",
            "attributes": {
                "vocabulary_provider": settings.vocabulary_provider,
                "translation_provider": settings.translation_provider,
                "max_concurrency": settings.max_concurrency,
            },
        },
    )
    return Engine(
        settings=settings, vocabulary=vocabulary, translation=translation, scanner=scanner
    )


__all__ = ["Engine", "build_engine", "provider_options"]
