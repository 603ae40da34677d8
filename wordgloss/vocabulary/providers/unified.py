"""Tag-based vocabulary provider backed by tiered unified data files."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Set, Union

from wordgloss import logging_manager as log_mgr
from wordgloss.config.constants import ADVANCED_TIER, BASE_TAGS, CORE_TIER, KNOWN_TAGS

from ..loader import VocabularyLoader
from ..models import MatchOptions, TagMatchMode
from .base import VocabularyProvider

logger = log_mgr.get_logger().getChild("vocabulary.unified")


class UnifiedVocabularyProvider(VocabularyProvider[MatchOptions]):
    """Match words by exam tags, Collins star rating and frequency.

    The ``core`` tier is loaded by :meth:`initialize`; further tiers such as
    ``advanced`` are merged on demand through :meth:`load_tier`.
    """

    name = "unified"
    options_type = MatchOptions

    def __init__(
        self,
        loader: VocabularyLoader,
        *,
        name: Optional[str] = None,
        base_tags: frozenset[str] = BASE_TAGS,
    ) -> None:
        super().__init__(loader, name=name)
        self.base_tags = frozenset(base_tags)
        self._loaded_tiers: List[str] = []
        self._tag_stats: Dict[str, int] = {}

    @property
    def loaded_tiers(self) -> List[str]:
        return list(self._loaded_tiers)

    async def _load(self) -> None:
        await self.load_tier(CORE_TIER)

    def _reset(self) -> None:
        super()._reset()
        self._loaded_tiers.clear()
        self._tag_stats.clear()

    async def load_tier(self, tier: str) -> int:
        """Merge ``tier`` into the vocabulary and return its word count."""

        if tier in self._loaded_tiers:
            return 0
        records = await self._loader.load_tier(tier)
        count = self._ingest(records)
        for word in records:
            for tag in self._vocabulary[word].tags:
                self._tag_stats[tag] = self._tag_stats.get(tag, 0) + 1
        self._loaded_tiers.append(tier)
        logger.info(
            "Loaded vocabulary tier",
            extra={
                "event": "vocabulary.tier.loaded",
                "provider": self.name,
                "tier": tier,
                "words": count,
            },
        )
        return count

    async def ensure_advanced_loaded(self) -> None:
        self.ensure_initialized()
        await self.load_tier(ADVANCED_TIER)

    def should_annotate(
        self, word: str, options: Union[MatchOptions, Mapping[str, Any], None] = None
    ) -> bool:
        self.ensure_initialized()
        entry = self._vocabulary.get(self.normalize_word(word))
        if entry is None:
            return False

        resolved = self.coerce_options(options)
        if resolved.min_star_rating > 0 and entry.star_rating < resolved.min_star_rating:
            return False

        if not resolved.target_tags:
            return bool(entry.tags)

        if not resolved.include_base and entry.tags <= self.base_tags:
            return False

        targets = frozenset(resolved.target_tags)
        if resolved.mode is TagMatchMode.ANY:
            return not entry.tags.isdisjoint(targets)
        if resolved.mode is TagMatchMode.ALL:
            return targets <= entry.tags
        return entry.tags == targets

    def has_tag(self, word: str, tag: str) -> bool:
        entry = self.lookup(word)
        return entry is not None and entry.has_tag(tag)

    def tags_for(self, word: str) -> Set[str]:
        entry = self.lookup(word)
        return set(entry.tags) if entry is not None else set()

    def supported_options(self) -> Dict[str, Dict[str, Any]]:
        return {
            "target_tags": {
                "type": "array",
                "default": [],
                "options": list(KNOWN_TAGS),
                "description": "Target vocabulary tags to annotate",
            },
            "mode": {
                "type": "string",
                "default": TagMatchMode.ANY.value,
                "options": [mode.value for mode in TagMatchMode],
                "description": "Tag matching mode",
            },
            "include_base": {
                "type": "boolean",
                "default": False,
                "description": "Include words that only carry base tags",
            },
            "min_star_rating": {
                "type": "number",
                "default": 0,
                "min": 0,
                "max": 5,
                "description": "Minimum Collins star rating",
            },
        }

    def stats(self) -> Dict[str, Any]:
        payload = super().stats()
        payload["loaded_tiers"] = self.loaded_tiers
        payload["tag_stats"] = dict(self._tag_stats)
        return payload


__all__ = ["UnifiedVocabularyProvider"]
