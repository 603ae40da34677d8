"""Abstract base class for vocabulary providers."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Iterable, Mapping, Optional, Type, TypeVar, Union

from wordgloss import logging_manager as log_mgr
from wordgloss.exceptions import (
    MissingCollaboratorError,
    ProviderNotInitializedError,
    VocabularyLoadError,
)

from ..loader import TierRecords, VocabularyLoader
from ..models import VocabularyEntry

logger = log_mgr.get_logger().getChild("vocabulary.provider")

OptionsT = TypeVar("OptionsT")


class VocabularyProvider(ABC, Generic[OptionsT]):
    """Decides whether a word deserves an annotation.

    Subclasses load their data in :meth:`_load` and implement the matching
    rule in :meth:`should_annotate`. Every query made before
    :meth:`initialize` completed raises :class:`ProviderNotInitializedError`.
    """

    # Subclasses must set these class attributes
    name: str = "base"
    options_type: Type[Any]

    def __init__(self, loader: VocabularyLoader, *, name: Optional[str] = None) -> None:
        if loader is None:
            raise MissingCollaboratorError(type(self).__name__, "VocabularyLoader")
        self._loader = loader
        if name:
            self.name = name
        self._vocabulary: Dict[str, VocabularyEntry] = {}
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def word_count(self) -> int:
        return len(self._vocabulary)

    async def initialize(self) -> None:
        """Load the provider's data; calling it again is a no-op."""

        async with self._init_lock:
            if self._initialized:
                return
            try:
                await self._load()
            except VocabularyLoadError:
                self._reset()
                raise
            except Exception as exc:
                self._reset()
                raise VocabularyLoadError(
                    f'Vocabulary provider "{self.name}" failed to initialize', cause=exc
                ) from exc
            self._initialized = True
        logger.info(
            "Vocabulary provider initialized",
            extra={
                "event": "vocabulary.provider.initialized",
                "provider": self.name,
                "words": self.word_count,
            },
        )

    @abstractmethod
    async def _load(self) -> None:
        """Populate the vocabulary through :meth:`_ingest`."""

    def _reset(self) -> None:
        self._vocabulary.clear()
        self._initialized = False

    def _ingest(self, records: TierRecords) -> int:
        for word, record in records.items():
            self._vocabulary[word] = VocabularyEntry.from_record(word, record, provider=self.name)
        return len(records)

    def normalize_word(self, word: str) -> str:
        return word.lower().strip()

    def ensure_initialized(self) -> None:
        if not self._initialized:
            raise ProviderNotInitializedError(self.name)

    def coerce_options(self, options: Union[OptionsT, Mapping[str, Any], None]) -> OptionsT:
        """Accept an options instance, a plain mapping or ``None`` for defaults."""

        if options is None:
            return self.options_type()
        if isinstance(options, self.options_type):
            return options
        if isinstance(options, Mapping):
            return self.options_type.from_mapping(options)
        raise TypeError(
            f"{type(self).__name__} expects {self.options_type.__name__}, "
            f"got {type(options).__name__}"
        )

    def lookup(self, word: str) -> Optional[VocabularyEntry]:
        self.ensure_initialized()
        return self._vocabulary.get(self.normalize_word(word))

    @abstractmethod
    def should_annotate(self, word: str, options: Union[OptionsT, Mapping[str, Any], None] = None) -> bool:
        """Return whether ``word`` should be annotated under ``options``."""

    def batch_check(
        self, words: Iterable[str], options: Union[OptionsT, Mapping[str, Any], None] = None
    ) -> Dict[str, bool]:
        """Return ``normalized word -> should annotate`` for every word."""

        self.ensure_initialized()
        resolved = self.coerce_options(options)
        results: Dict[str, bool] = {}
        for word in words:
            normalized = self.normalize_word(word)
            if normalized and normalized not in results:
                results[normalized] = self.should_annotate(normalized, resolved)
        return results

    def get_metadata(self, word: str) -> Optional[VocabularyEntry]:
        return self.lookup(word)

    def supported_options(self) -> Dict[str, Dict[str, Any]]:
        return {}

    def stats(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "initialized": self._initialized,
            "word_count": self.word_count,
        }


__all__ = ["VocabularyProvider"]
