"""Abstract base class for translation providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Protocol

from .models import TranslationResult

DEFAULT_SUPPORTED_LANGUAGES: List[Dict[str, str]] = [
    {"code": "auto", "name": "Auto Detect"},
    {"code": "en", "name": "English"},
    {"code": "zh-CN", "name": "Chinese (Simplified)"},
    {"code": "zh-TW", "name": "Chinese (Traditional)"},
    {"code": "ja", "name": "Japanese"},
    {"code": "ko", "name": "Korean"},
    {"code": "es", "name": "Spanish"},
    {"code": "fr", "name": "French"},
    {"code": "de", "name": "German"},
]


class Translator(Protocol):
    """Anything able to translate one word with an optional context string."""

    async def translate(
        self,
        text: str,
        source_lang: str,
        target_lang: str,
        *,
        context: Optional[str] = None,
    ) -> TranslationResult:
        ...


class TranslationProvider(ABC):
    """Base class for translation backends.

    Implementations must be safe to call concurrently and are responsible
    for their own request timeouts; a failure is raised as an exception.
    """

    # Subclasses must set this class attribute
    name: str = "base"

    @abstractmethod
    async def translate(
        self,
        text: str,
        source_lang: str,
        target_lang: str,
        *,
        context: Optional[str] = None,
    ) -> TranslationResult:
        """Translate ``text`` from ``source_lang`` into ``target_lang``."""

    async def detect_language(self, text: str) -> str:
        return "auto"

    def supported_languages(self) -> List[Dict[str, str]]:
        return [dict(item) for item in DEFAULT_SUPPORTED_LANGUAGES]


__all__ = ["DEFAULT_SUPPORTED_LANGUAGES", "TranslationProvider", "Translator"]
