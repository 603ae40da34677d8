"""Translation service: provider registry with a cache-through ``translate``."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from wordgloss import logging_manager as log_mgr
from wordgloss.cache import TTLCache
from wordgloss.config.constants import (
    CACHE_CLEANUP_INTERVAL_SECONDS,
    CACHE_TTL_SECONDS,
    DEFAULT_CACHE_SIZE,
    MAX_TRANSLATION_CACHE_SIZE,
    MIN_TRANSLATION_CACHE_SIZE,
)
from wordgloss.exceptions import (
    MissingCollaboratorError,
    NoActiveProviderError,
    TranslationError,
    UnknownProviderError,
)

from .base import TranslationProvider
from .models import TranslationResult

logger = log_mgr.get_logger().getChild("translation.service")

CacheKey = Tuple[str, str, str, str]


class TranslationService:
    """Route translation requests to the active provider.

    Results are cached per ``(text, source, target, provider)``. A cache size
    of ``0`` disables caching.
    """

    def __init__(
        self,
        *,
        cache_size: int = DEFAULT_CACHE_SIZE,
        cache_ttl: float = CACHE_TTL_SECONDS,
        cache_cleanup_interval: float = CACHE_CLEANUP_INTERVAL_SECONDS,
        auto_cleanup: bool = False,
    ) -> None:
        self._providers: Dict[str, TranslationProvider] = {}
        self._active_name: Optional[str] = None
        self._cache_ttl = cache_ttl
        self._cache_enabled = cache_size > 0
        self._cache: TTLCache[CacheKey, TranslationResult] = TTLCache(
            max_size=max(1, cache_size),
            ttl=cache_ttl,
            cleanup_interval=cache_cleanup_interval,
            auto_cleanup=auto_cleanup,
            name="translation",
        )

    @property
    def cache(self) -> TTLCache[CacheKey, TranslationResult]:
        return self._cache

    @property
    def cache_enabled(self) -> bool:
        return self._cache_enabled

    @property
    def max_cache_size(self) -> int:
        return self._cache.max_size if self._cache_enabled else 0

    def register_provider(self, provider: TranslationProvider, name: Optional[str] = None) -> None:
        if provider is None:
            raise MissingCollaboratorError(type(self).__name__, "TranslationProvider")
        if not isinstance(provider, TranslationProvider):
            raise TypeError("Provider must be an instance of TranslationProvider")
        key = name or provider.name
        self._providers[key] = provider
        logger.debug(
            "Registered translation provider",
            extra={"event": "translation.provider.registered", "provider": key},
        )

    def provider_names(self) -> List[str]:
        return list(self._providers)

    def set_active_provider(self, name: str) -> None:
        if name not in self._providers:
            raise UnknownProviderError(name, kind="translation")
        self._active_name = name
        logger.info(
            "Active translation provider set",
            extra={"event": "translation.provider.activated", "provider": name},
        )

    @property
    def active_provider_name(self) -> Optional[str]:
        return self._active_name

    def get_active_provider(self) -> TranslationProvider:
        if self._active_name is None:
            raise NoActiveProviderError("No active translation provider set")
        return self._providers[self._active_name]

    async def translate(
        self,
        text: str,
        source_lang: str,
        target_lang: str,
        *,
        context: Optional[str] = None,
        no_cache: bool = False,
    ) -> TranslationResult:
        """Translate ``text``; provider failures surface as :class:`TranslationError`."""

        provider = self.get_active_provider()
        key: CacheKey = (text, source_lang, target_lang, self._active_name or provider.name)
        use_cache = self._cache_enabled and not no_cache
        if use_cache:
            cached, found = self._cache.get(key)
            if found:
                return cached  # type: ignore[return-value]

        try:
            result = await provider.translate(text, source_lang, target_lang, context=context)
        except TranslationError:
            raise
        except Exception as exc:
            raise TranslationError(
                f"{exc.__class__.__name__}: {exc}",
                word=text,
                provider=provider.name,
                cause=exc,
            ) from exc

        if self._cache_enabled:
            self._cache.set(key, result)
        return result

    def enable_cache(self, size: int = DEFAULT_CACHE_SIZE) -> int:
        """Enable caching with ``size`` clamped to the supported range."""

        clamped = max(MIN_TRANSLATION_CACHE_SIZE, min(size, MAX_TRANSLATION_CACHE_SIZE))
        self._cache.resize(clamped)
        self._cache_enabled = True
        logger.debug(
            "Translation cache enabled",
            extra={"event": "translation.cache.enabled", "size": clamped},
        )
        return clamped

    def disable_cache(self) -> None:
        self._cache_enabled = False
        self._cache.clear()

    def clear_cache(self) -> None:
        self._cache.clear()

    async def detect_language(self, text: str) -> str:
        return await self.get_active_provider().detect_language(text)

    def supported_languages(self) -> List[Dict[str, str]]:
        return self.get_active_provider().supported_languages()

    def close(self) -> None:
        self._cache.close()


__all__ = ["TranslationService"]
