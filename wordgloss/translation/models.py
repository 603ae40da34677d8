"""Data models describing translation results."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(slots=True)
class Phonetic:
    """Pronunciation of a word, e.g. ``/həˈloʊ/`` of type ``us``."""

    text: str
    type: str = "default"
    audio_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"text": self.text, "type": self.type}
        if self.audio_url:
            payload["audio_url"] = self.audio_url
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Phonetic":
        return cls(
            text=str(data.get("text", "")),
            type=str(data.get("type") or "default"),
            audio_url=data.get("audio_url") or data.get("audioUrl"),
        )


@dataclass(slots=True)
class Definition:
    """One sense of a word with its part of speech."""

    part_of_speech: str
    text: str
    synonyms: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "part_of_speech": self.part_of_speech,
            "text": self.text,
            "synonyms": list(self.synonyms),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Definition":
        return cls(
            part_of_speech=str(data.get("part_of_speech", data.get("partOfSpeech", ""))),
            text=str(data.get("text", "")),
            synonyms=[str(item) for item in data.get("synonyms") or []],
        )


@dataclass(slots=True)
class Example:
    """Example sentence paired with its translation."""

    source: str
    translation: str

    def to_dict(self) -> Dict[str, Any]:
        return {"source": self.source, "translation": self.translation}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Example":
        return cls(source=str(data.get("source", "")), translation=str(data.get("translation", "")))


@dataclass(slots=True)
class TranslationResult:
    """Translation of one word or phrase plus optional dictionary details."""

    original_text: str
    translated_text: str
    source_lang: str
    target_lang: str
    phonetics: List[Phonetic] = field(default_factory=list)
    definitions: List[Definition] = field(default_factory=list)
    examples: List[Example] = field(default_factory=list)
    annotation_text: str = ""
    provider: str = ""
    timestamp: float = field(default_factory=time.time)

    @property
    def display_text(self) -> str:
        """Text shown next to the annotated word."""
        return self.annotation_text or self.translated_text

    def preferred_phonetic(self) -> Optional[Phonetic]:
        """Return the US phonetic, else the default one, else the first."""
        for wanted in ("us", "default"):
            for phonetic in self.phonetics:
                if phonetic.type == wanted:
                    return phonetic
        return self.phonetics[0] if self.phonetics else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "original_text": self.original_text,
            "translated_text": self.translated_text,
            "source_lang": self.source_lang,
            "target_lang": self.target_lang,
            "phonetics": [item.to_dict() for item in self.phonetics],
            "definitions": [item.to_dict() for item in self.definitions],
            "examples": [item.to_dict() for item in self.examples],
            "annotation_text": self.annotation_text,
            "provider": self.provider,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TranslationResult":
        """Create from dictionary; camelCase keys are accepted as well."""

        def _pick(snake: str, camel: str, default: Any = "") -> Any:
            value = data.get(snake, data.get(camel))
            return default if value is None else value

        return cls(
            original_text=str(_pick("original_text", "originalText")),
            translated_text=str(_pick("translated_text", "translatedText")),
            source_lang=str(_pick("source_lang", "sourceLang")),
            target_lang=str(_pick("target_lang", "targetLang")),
            phonetics=[Phonetic.from_dict(item) for item in data.get("phonetics") or [] if isinstance(item, dict)],
            definitions=[
                Definition.from_dict(item) for item in data.get("definitions") or [] if isinstance(item, dict)
            ],
            examples=[Example.from_dict(item) for item in data.get("examples") or [] if isinstance(item, dict)],
            annotation_text=str(_pick("annotation_text", "annotationText")),
            provider=str(data.get("provider") or ""),
            timestamp=float(data.get("timestamp") or time.time()),
        )

    def to_json(self, *, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)

    @classmethod
    def from_json(cls, payload: str) -> "TranslationResult":
        return cls.from_dict(json.loads(payload))


def build_annotation_text(result: TranslationResult) -> str:
    """Compose the inline hint: preferred phonetic, then a gloss.

    Single words use their first definition; phrases use the full
    translation.
    """

    parts: List[str] = []
    phonetic = result.preferred_phonetic()
    if phonetic is not None and phonetic.text:
        parts.append(phonetic.text)
    if result.definitions and len(result.original_text.split(" ")) == 1:
        parts.append(result.definitions[0].text)
    elif result.translated_text:
        parts.append(result.translated_text)
    return " ".join(parts)


__all__ = [
    "Definition",
    "Example",
    "Phonetic",
    "TranslationResult",
    "build_annotation_text",
]
