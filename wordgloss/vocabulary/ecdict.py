"""Convert an ECDICT CSV export into tiered vocabulary files.

Output files follow the ``{"meta": {...}, "words": {...}}`` schema read by
:class:`wordgloss.vocabulary.loader.JsonVocabularyLoader`:

* ``vocabulary-core.json`` - words carrying any core exam tag, plus tagged
  words that belong to neither group (TOEFL/IELTS-only words).
* ``vocabulary-advanced.json`` - GRE words without a core tag.
* ``vocabulary-frequency.json`` - every word ranked within the top 20000.
"""

from __future__ import annotations

import csv
import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from wordgloss import logging_manager as log_mgr
from wordgloss.config.constants import ADVANCED_TIER, CORE_TIER, FREQUENCY_TIER

from .loader import tier_file_name

logger = log_mgr.get_logger().getChild("vocabulary.ecdict")

ECDICT_FIELDS: Tuple[str, ...] = (
    "word",
    "phonetic",
    "definition",
    "translation",
    "pos",
    "collins",
    "oxford",
    "tag",
    "bnc",
    "frq",
    "exchange",
)

FREQUENCY_BANDS: Tuple[Tuple[int, str], ...] = (
    (1000, "top1000"),
    (3000, "top3000"),
    (5000, "top5000"),
    (10000, "top10000"),
    (20000, "top20000"),
)


@dataclass(slots=True)
class EcdictConfig:
    """Tier assignment rules and per-tier size caps."""

    core_tags: Tuple[str, ...] = ("cet4", "cet6", "ky", "gk", "zk")
    advanced_tags: Tuple[str, ...] = ("gre",)
    max_core: int = 10000
    max_advanced: int = 8000
    max_frequency: int = 20000
    max_rank: int = 20000
    min_star_rating: int = 0


@dataclass(slots=True)
class ConversionStats:
    """Counters describing one conversion run."""

    total_rows: int = 0
    processed_words: int = 0
    skipped_words: int = 0
    core: int = 0
    advanced: int = 0
    frequency: int = 0
    multi_tag: int = 0
    tag_distribution: Dict[str, int] = field(default_factory=dict)
    output_files: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _to_int(value: str) -> int:
    try:
        return int(str(value).strip() or 0)
    except ValueError:
        return 0


def parse_row(row: Sequence[str]) -> Optional[Dict[str, Any]]:
    """Map a CSV row onto ECDICT field names; short rows yield ``None``."""

    if len(row) < len(ECDICT_FIELDS):
        return None
    record = dict(zip(ECDICT_FIELDS, (value.strip() for value in row)))
    record["word"] = record["word"].lower()
    for key in ("collins", "oxford", "bnc", "frq"):
        record[key] = _to_int(record[key])
    record["tags"] = [tag for tag in record.pop("tag").lower().split() if tag]
    return record


def frequency_band(rank: int) -> Optional[str]:
    for limit, label in FREQUENCY_BANDS:
        if rank <= limit:
            return label
    return None


def _word_entry(record: Mapping[str, Any]) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "tags": list(record["tags"]),
        "frequency": record["bnc"] or record["frq"] or 0,
    }
    if record["collins"] > 0:
        entry["collins"] = record["collins"]
    if record["oxford"] > 0:
        entry["oxford"] = record["oxford"]
    return entry


def _iter_rows(csv_path: Path) -> Iterator[Tuple[int, List[str]]]:
    with open(csv_path, "r", encoding="utf-8", newline="") as handle:
        reader = csv.reader(handle)
        for line_number, row in enumerate(reader, start=1):
            yield line_number, row


def _document(name: str, description: str, kind: str, words: Dict[str, Any], tags: Sequence[str] = ()) -> Dict[str, Any]:
    meta: Dict[str, Any] = {
        "name": name,
        "version": "1.0.0",
        "type": kind,
        "description": description,
        "source": "ECDICT",
        "source_url": "https://github.com/skywind3000/ECDICT",
        "license": "MIT License",
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "word_count": len(words),
    }
    if tags:
        meta["tags"] = list(tags)
    return {"meta": meta, "words": words}


def convert_ecdict(
    csv_path: Path | str,
    output_dir: Path | str,
    *,
    config: Optional[EcdictConfig] = None,
) -> ConversionStats:
    """Split ``csv_path`` into tier files under ``output_dir``."""

    config = config or EcdictConfig()
    stats = ConversionStats()
    core_tags = set(config.core_tags)
    advanced_tags = set(config.advanced_tags)
    core: Dict[str, Any] = {}
    advanced: Dict[str, Any] = {}
    frequency: Dict[str, Any] = {}

    for line_number, row in _iter_rows(Path(csv_path)):
        stats.total_rows += 1
        if line_number == 1:
            continue
        record = parse_row(row)
        if record is None or not record["word"]:
            stats.skipped_words += 1
            continue

        tags: List[str] = record["tags"]
        rank = record["bnc"] or record["frq"] or 0
        if not tags and rank == 0:
            stats.skipped_words += 1
            continue
        if tags and config.min_star_rating > 0 and record["collins"] < config.min_star_rating:
            stats.skipped_words += 1
            continue

        if len(tags) > 1:
            stats.multi_tag += 1
        for tag in tags:
            stats.tag_distribution[tag] = stats.tag_distribution.get(tag, 0) + 1

        added = False
        entry = _word_entry(record)
        if tags and (core_tags.intersection(tags) or not advanced_tags.intersection(tags)):
            if stats.core < config.max_core:
                core[record["word"]] = entry
                stats.core += 1
                added = True
        elif tags:
            if stats.advanced < config.max_advanced:
                advanced[record["word"]] = entry
                stats.advanced += 1
                added = True

        if 0 < rank <= config.max_rank and stats.frequency < config.max_frequency:
            band = frequency_band(rank)
            if band:
                frequency[record["word"]] = {
                    "rank": rank,
                    "tier": band,
                    "tags": tags,
                    "collins": record["collins"],
                }
                stats.frequency += 1

        if added:
            stats.processed_words += 1
        elif rank == 0:
            stats.skipped_words += 1

    target = Path(output_dir)
    target.mkdir(parents=True, exist_ok=True)
    documents = {
        CORE_TIER: _document(
            "Core Vocabulary",
            "CET-4/6, Kaoyan, Gaokao, Zhongkao and other tagged exam words",
            "unified",
            core,
            config.core_tags,
        ),
        ADVANCED_TIER: _document(
            "Advanced Vocabulary",
            "GRE and other advanced words",
            "unified",
            advanced,
            config.advanced_tags,
        ),
        FREQUENCY_TIER: _document(
            "Frequency Vocabulary",
            f"Top {config.max_rank} most frequent English words",
            "frequency",
            frequency,
        ),
    }
    for tier, document in documents.items():
        path = target / tier_file_name(tier)
        with open(path, "w", encoding="utf-8") as handle:
            json.dump(document, handle, ensure_ascii=False, indent=2)
        stats.output_files[tier] = str(path)

    logger.info(
        "ECDICT conversion complete",
        extra={
            "event": "vocabulary.ecdict.converted",
            "core": stats.core,
            "advanced": stats.advanced,
            "frequency": stats.frequency,
            "skipped": stats.skipped_words,
        },
    )
    return stats


__all__ = [
    "ConversionStats",
    "ECDICT_FIELDS",
    "EcdictConfig",
    "convert_ecdict",
    "frequency_band",
    "parse_row",
]
