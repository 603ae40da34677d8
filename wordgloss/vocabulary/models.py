"""Data models shared by the vocabulary providers and service."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from wordgloss.config.constants import DEFAULT_FREQUENCY_THRESHOLD


class TagMatchMode(str, Enum):
    """How an entry's tags are compared against the requested target tags."""

    ANY = "any"
    ALL = "all"
    EXACT = "exact"


class TierMode(str, Enum):
    """Ordinal comparison applied by the legacy tier provider."""

    ABOVE = "above"
    EXACT = "exact"
    BELOW = "below"


class FrequencyMode(str, Enum):
    """``below`` annotates rare words, ``above`` annotates common ones."""

    BELOW = "below"
    ABOVE = "above"


def _coerce_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _coerce_tags(value: Any) -> frozenset[str]:
    if not value:
        return frozenset()
    if isinstance(value, str):
        value = value.split()
    return frozenset(str(tag).strip().lower() for tag in value if str(tag).strip())


@dataclass(frozen=True, slots=True)
class VocabularyEntry:
    """Immutable dictionary record for a single normalised word."""

    word: str
    tags: frozenset[str] = field(default_factory=frozenset)
    frequency_rank: Optional[int] = None
    star_rating: int = 0
    oxford: bool = False
    level: Optional[str] = None
    provider: str = ""

    def has_tag(self, tag: str) -> bool:
        return tag.lower() in self.tags

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        payload: Dict[str, Any] = {
            "word": self.word,
            "tags": sorted(self.tags),
            "frequency_rank": self.frequency_rank,
            "star_rating": self.star_rating,
            "oxford": self.oxford,
            "provider": self.provider,
        }
        if self.level is not None:
            payload["level"] = self.level
        return payload

    @classmethod
    def from_record(
        cls, word: str, record: Mapping[str, Any], *, provider: str = ""
    ) -> "VocabularyEntry":
        """Build an entry from a raw vocabulary file record.

        Accepts the tiered schema (``tags``/``frequency``/``collins``/``oxford``),
        the legacy single-level schema (``level``) and the frequency schema
        (``rank``).
        """
        rank = _coerce_int(record.get("rank"))
        if rank is None:
            rank = _coerce_int(record.get("frequency_rank", record.get("frequency")))
        star = _coerce_int(record.get("collins", record.get("star_rating"))) or 0
        level = record.get("level")
        return cls(
            word=word.strip().lower(),
            tags=_coerce_tags(record.get("tags")),
            frequency_rank=rank,
            star_rating=max(0, min(5, star)),
            oxford=bool(record.get("oxford")),
            level=str(level).lower() if level else None,
            provider=provider,
        )


def _fingerprint(payload: Mapping[str, Any]) -> str:
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha1(encoded.encode("utf-8")).hexdigest()[:16]


def _as_tuple(values: Union[str, Iterable[str], None]) -> Tuple[str, ...]:
    if not values:
        return ()
    if isinstance(values, str):
        values = values.replace(",", " ").split()
    seen = []
    for value in values:
        normalized = str(value).strip().lower()
        if normalized and normalized not in seen:
            seen.append(normalized)
    return tuple(seen)


@dataclass(frozen=True, slots=True)
class MatchOptions:
    """Tag matching options for the unified provider.

    Instances compare structurally; two equal option sets always produce the
    same :meth:`fingerprint`.
    """

    target_tags: Tuple[str, ...] = ()
    mode: TagMatchMode = TagMatchMode.ANY
    include_base: bool = False
    min_star_rating: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "target_tags", _as_tuple(self.target_tags))
        object.__setattr__(self, "mode", TagMatchMode(self.mode))
        if not 0 <= int(self.min_star_rating) <= 5:
            raise ValueError("min_star_rating must be between 0 and 5")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target_tags": sorted(self.target_tags),
            "mode": self.mode.value,
            "include_base": self.include_base,
            "min_star_rating": int(self.min_star_rating),
        }

    def fingerprint(self) -> str:
        return _fingerprint({"kind": "tags", **self.to_dict()})

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "MatchOptions":
        """Create from a mapping using snake_case or camelCase keys."""
        data = data or {}
        return cls(
            target_tags=_as_tuple(data.get("target_tags", data.get("targetTags"))),
            mode=TagMatchMode(str(data.get("mode", TagMatchMode.ANY.value)).lower()),
            include_base=bool(data.get("include_base", data.get("includeBase", False))),
            min_star_rating=int(
                data.get("min_star_rating", data.get("minStarRating", data.get("minCollins", 0)))
                or 0
            ),
        )


@dataclass(frozen=True, slots=True)
class TierMatchOptions:
    """Options for the legacy ordinal tier provider."""

    levels: Tuple[str, ...] = ("cet6",)
    mode: TierMode = TierMode.ABOVE
    include_base: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "levels", _as_tuple(self.levels))
        object.__setattr__(self, "mode", TierMode(self.mode))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "levels": sorted(self.levels),
            "mode": self.mode.value,
            "include_base": self.include_base,
        }

    def fingerprint(self) -> str:
        return _fingerprint({"kind": "tier", **self.to_dict()})

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "TierMatchOptions":
        data = data or {}
        levels = data.get("levels") or ("cet6",)
        return cls(
            levels=_as_tuple(levels),
            mode=TierMode(str(data.get("mode", TierMode.ABOVE.value)).lower()),
            include_base=bool(data.get("include_base", data.get("includeBase", False))),
        )


@dataclass(frozen=True, slots=True)
class FrequencyMatchOptions:
    """Options for the frequency-rank provider."""

    threshold: int = DEFAULT_FREQUENCY_THRESHOLD
    mode: FrequencyMode = FrequencyMode.BELOW

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", FrequencyMode(self.mode))
        if int(self.threshold) < 1:
            raise ValueError("threshold must be a positive rank")

    def to_dict(self) -> Dict[str, Any]:
        return {"threshold": int(self.threshold), "mode": self.mode.value}

    def fingerprint(self) -> str:
        return _fingerprint({"kind": "frequency", **self.to_dict()})

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "FrequencyMatchOptions":
        data = data or {}
        return cls(
            threshold=int(data.get("threshold", DEFAULT_FREQUENCY_THRESHOLD)),
            mode=FrequencyMode(str(data.get("mode", FrequencyMode.BELOW.value)).lower()),
        )


ProviderOptions = Union[MatchOptions, TierMatchOptions, FrequencyMatchOptions]


__all__ = [
    "FrequencyMatchOptions",
    "FrequencyMode",
    "MatchOptions",
    "ProviderOptions",
    "TagMatchMode",
    "TierMatchOptions",
    "TierMode",
    "VocabularyEntry",
]
