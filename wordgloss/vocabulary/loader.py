"""Vocabulary data sources keyed by tier name."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol

from wordgloss import logging_manager as log_mgr
from wordgloss.config.constants import LEGACY_TIER
from wordgloss.exceptions import VocabularyLoadError

logger = log_mgr.get_logger().getChild("vocabulary.loader")

TierRecords = Dict[str, Mapping[str, Any]]

# Tiers whose file names predate the ``vocabulary-<tier>.json`` convention.
LEGACY_FILE_NAMES: Dict[str, str] = {
    LEGACY_TIER: "cet-combined.json",
}


class VocabularyLoader(Protocol):
    """Source of raw ``word -> record`` mappings, one per tier."""

    async def load_tier(self, tier: str) -> TierRecords:
        ...


def tier_file_name(tier: str) -> str:
    """Return the file name that stores ``tier``."""

    return LEGACY_FILE_NAMES.get(tier, f"vocabulary-{tier}.json")


def extract_words(payload: Any, *, tier: str) -> TierRecords:
    """Return the ``words`` mapping of a vocabulary document.

    Keys are lower-cased; a later duplicate overrides an earlier one.
    """

    if not isinstance(payload, Mapping):
        raise VocabularyLoadError("Vocabulary document must be a JSON object", tier=tier)
    words = payload.get("words", {})
    if not isinstance(words, Mapping):
        raise VocabularyLoadError('Vocabulary "words" must be an object', tier=tier)
    records: TierRecords = {}
    for word, record in words.items():
        if not isinstance(record, Mapping):
            record = {}
        key = str(word).strip().lower()
        if key:
            records[key] = record
    return records


class JsonVocabularyLoader:
    """Read tier files from a directory of JSON vocabulary documents."""

    def __init__(self, base_dir: Path | str, *, file_names: Optional[Mapping[str, str]] = None) -> None:
        self.base_dir = Path(base_dir).expanduser()
        self._file_names = dict(file_names or {})

    def path_for(self, tier: str) -> Path:
        name = self._file_names.get(tier) or tier_file_name(tier)
        return self.base_dir / name

    def _read(self, tier: str) -> TierRecords:
        path = self.path_for(tier)
        try:
            with open(path, "r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except FileNotFoundError as exc:
            raise VocabularyLoadError(f"Vocabulary file not found: {path}", tier=tier, cause=exc) from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise VocabularyLoadError(
                f"Failed to read vocabulary file {path}", tier=tier, cause=exc
            ) from exc
        return extract_words(payload, tier=tier)

    async def load_tier(self, tier: str) -> TierRecords:
        records = await asyncio.to_thread(self._read, tier)
        logger.debug(
            "Loaded vocabulary tier",
            extra={"event": "vocabulary.tier.read", "tier": tier, "words": len(records)},
        )
        return records


class InMemoryVocabularyLoader:
    """Serve tiers from mappings held in memory.

    ``failing_tiers`` simulates a transport failure for the named tiers.
    """

    def __init__(
        self,
        tiers: Optional[Mapping[str, Mapping[str, Mapping[str, Any]]]] = None,
        *,
        failing_tiers: Iterable[str] = (),
    ) -> None:
        self._tiers: Dict[str, TierRecords] = {}
        for name, words in (tiers or {}).items():
            self.add_tier(name, words)
        self.failing_tiers = set(failing_tiers)
        self.calls: List[str] = []

    def add_tier(self, name: str, words: Mapping[str, Mapping[str, Any]]) -> None:
        self._tiers[name] = extract_words({"words": dict(words)}, tier=name)

    async def load_tier(self, tier: str) -> TierRecords:
        self.calls.append(tier)
        if tier in self.failing_tiers:
            raise VocabularyLoadError("Simulated transport failure", tier=tier)
        if tier not in self._tiers:
            raise VocabularyLoadError("Unknown vocabulary tier", tier=tier)
        return dict(self._tiers[tier])


__all__ = [
    "InMemoryVocabularyLoader",
    "JsonVocabularyLoader",
    "LEGACY_FILE_NAMES",
    "TierRecords",
    "VocabularyLoader",
    "extract_words",
    "tier_file_name",
]
