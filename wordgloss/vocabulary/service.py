"""Vocabulary service owning the active provider and its result cache."""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from wordgloss import logging_manager as log_mgr
from wordgloss.cache import TTLCache
from wordgloss.config.constants import CACHE_TTL_SECONDS, DEFAULT_VOCABULARY_CACHE_SIZE
from wordgloss.exceptions import NoActiveProviderError, UnknownProviderError

from .models import ProviderOptions, VocabularyEntry
from .providers.base import VocabularyProvider

logger = log_mgr.get_logger().getChild("vocabulary.service")

CacheKey = Tuple[str, str, str]


class VocabularyService:
    """Registry of vocabulary providers with a cache-through query API.

    Results are memoised under ``(normalized word, provider name, options
    fingerprint)``. Switching provider or options clears the whole cache.
    The service is safe to query from concurrent workers.
    """

    def __init__(
        self,
        *,
        cache: Optional[TTLCache[CacheKey, bool]] = None,
        max_cache_size: int = DEFAULT_VOCABULARY_CACHE_SIZE,
        cache_ttl: float = CACHE_TTL_SECONDS,
    ) -> None:
        self._providers: Dict[str, VocabularyProvider] = {}
        self._active: Optional[VocabularyProvider] = None
        self._options: Optional[ProviderOptions] = None
        self._fingerprint = ""
        self._lock = threading.RLock()
        if cache is None:
            cache = TTLCache(max_size=max_cache_size, ttl=cache_ttl, name="vocabulary")
        self._cache: TTLCache[CacheKey, bool] = cache

    @property
    def cache(self) -> TTLCache[CacheKey, bool]:
        return self._cache

    @property
    def active_provider(self) -> Optional[VocabularyProvider]:
        return self._active

    @property
    def active_options(self) -> Optional[ProviderOptions]:
        return self._options

    def register_provider(self, provider: VocabularyProvider, name: Optional[str] = None) -> None:
        key = name or provider.name
        with self._lock:
            if key in self._providers:
                logger.warning(
                    "Vocabulary provider already registered; overwriting",
                    extra={"event": "vocabulary.provider.overwrite", "provider": key},
                )
            self._providers[key] = provider
        logger.debug(
            "Registered vocabulary provider",
            extra={"event": "vocabulary.provider.registered", "provider": key},
        )

    def get_provider(self, name: str) -> VocabularyProvider:
        try:
            return self._providers[name]
        except KeyError:
            raise UnknownProviderError(name) from None

    def provider_names(self) -> List[str]:
        return list(self._providers)

    async def set_active_provider(
        self, name: str, options: ProviderOptions | Mapping[str, Any] | None = None
    ) -> None:
        """Initialise ``name`` if needed, make it active and clear the cache."""

        provider = self.get_provider(name)
        if not provider.initialized:
            logger.info(
                "Initializing vocabulary provider",
                extra={"event": "vocabulary.provider.initializing", "provider": name},
            )
            await provider.initialize()
        resolved = provider.coerce_options(options)
        with self._lock:
            self._active = provider
            self._options = resolved
            self._fingerprint = resolved.fingerprint()
            self._cache.clear()
        logger.info(
            "Active vocabulary provider set",
            extra={
                "event": "vocabulary.provider.activated",
                "provider": name,
                "options": resolved.to_dict(),
            },
        )

    def set_options(self, options: ProviderOptions | Mapping[str, Any]) -> bool:
        """Replace the active options; returns ``True`` when they changed."""

        provider = self._require_active()
        resolved = provider.coerce_options(options)
        with self._lock:
            if resolved == self._options:
                return False
            self._options = resolved
            self._fingerprint = resolved.fingerprint()
            self._cache.clear()
        return True

    def _require_active(self) -> VocabularyProvider:
        provider = self._active
        if provider is None:
            raise NoActiveProviderError("No active vocabulary provider set")
        return provider

    def _cache_key(self, provider: VocabularyProvider, normalized: str) -> CacheKey:
        return (normalized, provider.name, self._fingerprint)

    def should_annotate(self, word: str) -> bool:
        provider = self._require_active()
        normalized = provider.normalize_word(word)
        key = self._cache_key(provider, normalized)
        cached, found = self._cache.get(key)
        if found:
            return bool(cached)
        result = provider.should_annotate(normalized, self._options)
        self._cache.set(key, result)
        return result

    def batch_check(self, words: Iterable[str]) -> Dict[str, bool]:
        """Return ``normalized word -> should annotate``; only misses reach the provider."""

        provider = self._require_active()
        results: Dict[str, bool] = {}
        uncached: List[str] = []
        pending: set[str] = set()
        for word in words:
            normalized = provider.normalize_word(word)
            if not normalized or normalized in results or normalized in pending:
                continue
            cached, found = self._cache.get(self._cache_key(provider, normalized))
            if found:
                results[normalized] = bool(cached)
            else:
                pending.add(normalized)
                uncached.append(normalized)

        if uncached:
            fresh = provider.batch_check(uncached, self._options)
            for normalized in uncached:
                value = bool(fresh.get(normalized, False))
                results[normalized] = value
                self._cache.set(self._cache_key(provider, normalized), value)
        return results

    def get_metadata(self, word: str) -> Optional[VocabularyEntry]:
        provider = self._require_active()
        return provider.get_metadata(provider.normalize_word(word))

    def combine_providers(
        self,
        names: Iterable[str],
        logic: str = "OR",
        options: Optional[Mapping[str, Any]] = None,
    ) -> Callable[[str], bool]:
        """Return a predicate combining several providers with ``OR`` or ``AND``."""

        normalized_logic = logic.upper()
        if normalized_logic not in {"OR", "AND"}:
            raise ValueError(f"Unknown combination logic: {logic}")
        per_provider = dict(options or {})
        members = [
            (provider, provider.coerce_options(per_provider.get(name)))
            for name, provider in ((name, self.get_provider(name)) for name in names)
        ]

        def _predicate(word: str) -> bool:
            outcomes = (provider.should_annotate(word, opts) for provider, opts in members)
            return any(outcomes) if normalized_logic == "OR" else all(outcomes)

        return _predicate

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.debug("Vocabulary cache cleared", extra={"event": "vocabulary.cache.cleared"})

    def set_max_cache_size(self, size: int) -> None:
        """Change the cache capacity; shrinking below the current size clears it."""

        if self._cache.size > size:
            self._cache.clear()
        self._cache.resize(size)

    def stats(self) -> Optional[Dict[str, Any]]:
        provider = self._active
        if provider is None:
            return None
        cache_stats = self._cache.stats()
        return {
            **provider.stats(),
            "cache_size": cache_stats.size,
            "max_cache_size": cache_stats.max_size,
            "cache_hit_rate": cache_stats.hit_rate,
        }

    def close(self) -> None:
        self._cache.close()


__all__ = ["VocabularyService"]
