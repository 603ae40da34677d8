"""Legacy provider comparing a single ordinal exam level per word."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Union

from wordgloss.config.constants import BASE_LEVEL, LEGACY_TIER, LEVEL_PRIORITY

from ..loader import VocabularyLoader
from ..models import TierMatchOptions, TierMode
from .base import VocabularyProvider


class TieredVocabularyProvider(VocabularyProvider[TierMatchOptions]):
    """Annotate words whose level is above, at or below the target levels."""

    name = "tiered"
    options_type = TierMatchOptions

    def __init__(
        self,
        loader: VocabularyLoader,
        *,
        name: Optional[str] = None,
        tier: str = LEGACY_TIER,
        level_priority: Mapping[str, int] = LEVEL_PRIORITY,
    ) -> None:
        super().__init__(loader, name=name)
        self.tier = tier
        self.level_priority = dict(level_priority)

    async def _load(self) -> None:
        self._ingest(await self._loader.load_tier(self.tier))

    def priority_of(self, level: Optional[str]) -> int:
        """Return the ordinal of ``level``; unknown levels rank 0."""

        if not level:
            return 0
        return self.level_priority.get(level.lower(), 0)

    def should_annotate(
        self, word: str, options: Union[TierMatchOptions, Mapping[str, Any], None] = None
    ) -> bool:
        self.ensure_initialized()
        entry = self._vocabulary.get(self.normalize_word(word))
        if entry is None:
            return False

        resolved = self.coerce_options(options)
        if not resolved.include_base and entry.level == BASE_LEVEL:
            return False

        word_priority = self.priority_of(entry.level)
        for target in resolved.levels:
            target_priority = self.priority_of(target)
            if resolved.mode is TierMode.ABOVE and word_priority >= target_priority:
                return True
            if resolved.mode is TierMode.EXACT and word_priority == target_priority:
                return True
            if resolved.mode is TierMode.BELOW and word_priority <= target_priority:
                return True
        return False

    def supported_options(self) -> Dict[str, Dict[str, Any]]:
        return {
            "levels": {
                "type": "array",
                "default": ["cet6"],
                "options": list(self.level_priority),
                "description": "Target vocabulary levels",
            },
            "mode": {
                "type": "string",
                "default": TierMode.ABOVE.value,
                "options": [mode.value for mode in TierMode],
                "description": "Annotation mode",
            },
            "include_base": {
                "type": "boolean",
                "default": False,
                "description": f"Include base level ({BASE_LEVEL}) words",
            },
        }

    def stats(self) -> Dict[str, Any]:
        payload = super().stats()
        if self.initialized:
            counts: Dict[str, int] = {}
            for entry in self._vocabulary.values():
                key = entry.level or "unknown"
                counts[key] = counts.get(key, 0) + 1
            payload["level_counts"] = counts
        return payload


__all__ = ["TieredVocabularyProvider"]
