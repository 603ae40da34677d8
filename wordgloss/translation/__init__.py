"""Translation capability: result models, providers and the routing service."""

from .base import TranslationProvider, Translator
from .debug_provider import DebugTranslationProvider, detect_source_language
from .models import Definition, Example, Phonetic, TranslationResult, build_annotation_text
from .service import TranslationService

__all__ = [
    "DebugTranslationProvider",
    "Definition",
    "Example",
    "Phonetic",
    "TranslationProvider",
    "TranslationResult",
    "TranslationService",
    "Translator",
    "build_annotation_text",
    "detect_source_language",
]
