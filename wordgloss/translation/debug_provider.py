"""Offline translation provider returning canned data.

Useful for development and tests: no network access, deterministic output
and an optional artificial delay to exercise concurrency.
"""

from __future__ import annotations

import asyncio
import copy
from typing import Any, Dict, Mapping, Optional

import regex

from wordgloss import logging_manager as log_mgr

from .base import TranslationProvider
from .models import Definition, Example, Phonetic, TranslationResult

logger = log_mgr.get_logger().getChild("translation.debug")

_HAN_PATTERN = regex.compile(r"\p{Han}")
_KANA_PATTERN = regex.compile(r"[\p{Hiragana}\p{Katakana}]")
_HANGUL_PATTERN = regex.compile(r"\p{Hangul}")

BUILTIN_ENTRIES: Dict[str, Dict[str, Dict[str, Any]]] = {
    "hello": {
        "zh-CN": {
            "translation": "你好",
            "phonetics": [{"text": "/həˈloʊ/", "type": "us"}, {"text": "/həˈləʊ/", "type": "uk"}],
            "definitions": [
                {"part_of_speech": "int.", "text": "(用于问候)喂，你好", "synonyms": ["hi", "hey"]},
                {"part_of_speech": "n.", "text": "招呼，问候"},
                {"part_of_speech": "v.", "text": "打招呼", "synonyms": ["greet"]},
            ],
            "examples": [
                {"source": "Hello! How are you?", "translation": "你好！你好吗？"},
                {"source": "Say hello to your parents.", "translation": "向你的父母问好。"},
            ],
        },
        "ja": {
            "translation": "こんにちは",
            "phonetics": [{"text": "/həˈloʊ/", "type": "us"}],
            "definitions": [{"part_of_speech": "int.", "text": "挨拶の言葉"}],
            "examples": [{"source": "Hello! How are you?", "translation": "こんにちは！元気ですか？"}],
        },
    },
    "apple": {
        "zh-CN": {
            "translation": "苹果",
            "phonetics": [{"text": "/ˈæpl/", "type": "us"}, {"text": "/ˈæpl/", "type": "uk"}],
            "definitions": [
                {"part_of_speech": "n.", "text": "苹果（水果）"},
                {"part_of_speech": "n.", "text": "苹果树"},
                {"part_of_speech": "n.", "text": "苹果公司"},
            ],
            "examples": [
                {"source": "An apple a day keeps the doctor away.", "translation": "一天一苹果，医生远离我。"},
                {"source": "I like red apples.", "translation": "我喜欢红苹果。"},
            ],
        }
    },
    "world": {
        "zh-CN": {
            "translation": "世界",
            "phonetics": [{"text": "/wɜːrld/", "type": "us"}],
            "definitions": [
                {"part_of_speech": "n.", "text": "世界；地球", "synonyms": ["earth", "globe"]},
                {"part_of_speech": "n.", "text": "领域；界", "synonyms": ["realm", "sphere"]},
            ],
            "examples": [
                {"source": "Hello world!", "translation": "你好，世界！"},
                {"source": "The world is changing.", "translation": "世界正在改变。"},
            ],
        }
    },
}


def detect_source_language(text: str) -> str:
    """Guess the language of ``text`` from the scripts it contains."""

    if _HAN_PATTERN.search(text) and not _KANA_PATTERN.search(text):
        return "zh-CN"
    if _KANA_PATTERN.search(text):
        return "ja"
    if _HANGUL_PATTERN.search(text):
        return "ko"
    return "en"


class DebugTranslationProvider(TranslationProvider):
    """Deterministic provider with a few builtin entries and a generic fallback."""

    name = "debug"

    def __init__(self, *, delay: float = 0.0, show_phonetic_in_annotation: bool = True) -> None:
        self.delay = max(0.0, delay)
        self.show_phonetic_in_annotation = show_phonetic_in_annotation
        self._entries: Dict[str, Dict[str, Dict[str, Any]]] = copy.deepcopy(BUILTIN_ENTRIES)

    def add_entry(self, word: str, target_lang: str, data: Mapping[str, Any]) -> None:
        """Register canned data for ``word`` translated into ``target_lang``."""

        self._entries.setdefault(word.strip().lower(), {})[target_lang] = dict(data)
        logger.debug(
            "Added debug translation entry",
            extra={"event": "translation.debug.entry_added", "word": word, "target_lang": target_lang},
        )

    async def translate(
        self,
        text: str,
        source_lang: str,
        target_lang: str,
        *,
        context: Optional[str] = None,
    ) -> TranslationResult:
        if self.delay:
            await asyncio.sleep(self.delay)
        resolved_source = source_lang
        if not source_lang or source_lang == "auto":
            resolved_source = detect_source_language(text)
        return self._build_result(text, resolved_source, target_lang)

    def _build_result(self, text: str, source_lang: str, target_lang: str) -> TranslationResult:
        data = self._entries.get(text.strip().lower(), {}).get(target_lang)
        if data is None:
            data = {
                "translation": f"{text}_translated",
                "phonetics": [{"text": "/debug/", "type": "debug"}],
                "definitions": [{"part_of_speech": "n.", "text": f'[DEBUG] translation of "{text}"'}],
                "examples": [{"source": f"Example with {text}", "translation": f"Example translation for {text}"}],
            }

        result = TranslationResult(
            original_text=text,
            translated_text=str(data.get("translation", "")),
            source_lang=source_lang,
            target_lang=target_lang,
            phonetics=[Phonetic.from_dict(item) for item in data.get("phonetics", [])],
            definitions=[Definition.from_dict(item) for item in data.get("definitions", [])],
            examples=[Example.from_dict(item) for item in data.get("examples", [])],
            provider=self.name,
        )
        if self.show_phonetic_in_annotation and result.phonetics:
            result.annotation_text = f"{result.phonetics[0].text} {result.translated_text}"
        else:
            result.annotation_text = result.translated_text
        return result

    async def detect_language(self, text: str) -> str:
        return detect_source_language(text)


__all__ = ["BUILTIN_ENTRIES", "DebugTranslationProvider", "detect_source_language"]
