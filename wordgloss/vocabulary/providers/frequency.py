"""Provider that decides by corpus frequency rank."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Union

from wordgloss.config.constants import FREQUENCY_TIER

from ..loader import VocabularyLoader
from ..models import FrequencyMatchOptions, FrequencyMode
from .base import VocabularyProvider


class FrequencyVocabularyProvider(VocabularyProvider[FrequencyMatchOptions]):
    """Annotate words by comparing their frequency rank to a threshold.

    Lower rank numbers are more common. Words missing from the data, or
    carrying no rank, are considered rare and always annotated.
    """

    name = "frequency"
    options_type = FrequencyMatchOptions

    def __init__(
        self,
        loader: VocabularyLoader,
        *,
        name: Optional[str] = None,
        tier: str = FREQUENCY_TIER,
    ) -> None:
        super().__init__(loader, name=name)
        self.tier = tier

    async def _load(self) -> None:
        self._ingest(await self._loader.load_tier(self.tier))

    def should_annotate(
        self, word: str, options: Union[FrequencyMatchOptions, Mapping[str, Any], None] = None
    ) -> bool:
        self.ensure_initialized()
        entry = self._vocabulary.get(self.normalize_word(word))
        if entry is None or entry.frequency_rank is None:
            return True

        resolved = self.coerce_options(options)
        if resolved.mode is FrequencyMode.BELOW:
            return entry.frequency_rank > resolved.threshold
        return entry.frequency_rank < resolved.threshold

    def supported_options(self) -> Dict[str, Dict[str, Any]]:
        return {
            "threshold": {
                "type": "number",
                "default": FrequencyMatchOptions().threshold,
                "min": 1,
                "max": 60000,
                "description": "Frequency rank threshold",
            },
            "mode": {
                "type": "string",
                "default": FrequencyMode.BELOW.value,
                "options": [mode.value for mode in FrequencyMode],
                "description": "below annotates rare words, above annotates common words",
            },
        }

    def stats(self) -> Dict[str, Any]:
        payload = super().stats()
        ranks = [
            entry.frequency_rank
            for entry in self._vocabulary.values()
            if entry.frequency_rank is not None
        ]
        if ranks:
            payload["rank_range"] = {"min": min(ranks), "max": max(ranks)}
        return payload


__all__ = ["FrequencyVocabularyProvider"]
