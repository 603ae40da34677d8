"""Tests for vocabulary file loading and ECDICT conversion."""

from __future__ import annotations

import asyncio
import csv
import json

import pytest

from wordgloss.exceptions import VocabularyLoadError
from wordgloss.vocabulary import (
    FrequencyVocabularyProvider,
    JsonVocabularyLoader,
    MatchOptions,
    UnifiedVocabularyProvider,
)
from wordgloss.vocabulary.ecdict import (
    ECDICT_FIELDS,
    EcdictConfig,
    convert_ecdict,
    frequency_band,
    parse_row,
)
from wordgloss.vocabulary.loader import extract_words, tier_file_name

pytestmark = pytest.mark.vocabulary


def _row(word, *, tag="", collins=0, oxford=0, bnc=0, frq=0):
    return [word, "", "", "", "", str(collins), str(oxford), tag, str(bnc), str(frq), ""]


@pytest.fixture
def ecdict_csv(tmp_path):
    path = tmp_path / "ecdict.csv"
    with open(path, "w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(ECDICT_FIELDS)
        writer.writerow(_row("Apple", tag="zk gk cet4", collins=3, oxford=1, bnc=1200))
        writer.writerow(_row("obdurate", tag="gre", bnc=25000))
        writer.writerow(_row("tacit", tag="toefl", frq=8000))
        writer.writerow(_row("the", bnc=1))
        writer.writerow(_row("zzz"))
        writer.writerow(["bad"])
    return path


class TestJsonVocabularyLoader:
    def test_reads_words_and_lowercases_keys(self, tmp_path):
        (tmp_path / "vocabulary-core.json").write_text(
            json.dumps({"meta": {}, "words": {"Apple": {"tags": ["cet4"]}}}), encoding="utf-8"
        )

        records = asyncio.run(JsonVocabularyLoader(tmp_path).load_tier("core"))

        assert records == {"apple": {"tags": ["cet4"]}}

    def test_missing_file_raises_load_error(self, tmp_path):
        with pytest.raises(VocabularyLoadError) as excinfo:
            asyncio.run(JsonVocabularyLoader(tmp_path).load_tier("core"))

        assert excinfo.value.tier == "core"
        assert isinstance(excinfo.value.cause, FileNotFoundError)

    def test_malformed_json_raises_load_error(self, tmp_path):
        (tmp_path / "vocabulary-core.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(VocabularyLoadError):
            asyncio.run(JsonVocabularyLoader(tmp_path).load_tier("core"))

    def test_words_must_be_an_object(self):
        with pytest.raises(VocabularyLoadError):
            extract_words({"words": ["apple"]}, tier="core")
        with pytest.raises(VocabularyLoadError):
            extract_words(["apple"], tier="core")

    def test_file_names(self, tmp_path):
        assert tier_file_name("advanced") == "vocabulary-advanced.json"
        assert tier_file_name("cet-combined") == "cet-combined.json"
        loader = JsonVocabularyLoader(tmp_path, file_names={"core": "custom.json"})
        assert loader.path_for("core") == tmp_path / "custom.json"


class TestEcdictConversion:
    def test_parse_row(self):
        record = parse_row(_row("Word", tag="cet4 CET6", collins=2, bnc=10))

        assert record["word"] == "word"
        assert record["tags"] == ["cet4", "cet6"]
        assert record["collins"] == 2
        assert parse_row(["too", "short"]) is None

    @pytest.mark.parametrize(
        "rank, band",
        [(1, "top1000"), (1000, "top1000"), (2500, "top3000"), (15000, "top20000"), (20001, None)],
    )
    def test_frequency_band(self, rank, band):
        assert frequency_band(rank) == band

    def test_conversion_splits_tiers(self, ecdict_csv, tmp_path):
        output = tmp_path / "out"

        stats = convert_ecdict(ecdict_csv, output)

        assert stats.total_rows == 7
        assert (stats.core, stats.advanced, stats.frequency) == (2, 1, 3)
        assert stats.skipped_words == 2
        assert stats.processed_words == 3
        assert stats.multi_tag == 1
        assert stats.tag_distribution["gre"] == 1

        core = json.loads((output / "vocabulary-core.json").read_text(encoding="utf-8"))
        advanced = json.loads((output / "vocabulary-advanced.json").read_text(encoding="utf-8"))
        frequency = json.loads((output / "vocabulary-frequency.json").read_text(encoding="utf-8"))
        assert set(core["words"]) == {"apple", "tacit"}
        assert set(advanced["words"]) == {"obdurate"}
        assert frequency["words"]["the"] == {"rank": 1, "tier": "top1000", "tags": [], "collins": 0}
        assert frequency["words"]["tacit"]["tier"] == "top10000"
        assert core["meta"]["word_count"] == 2

    def test_word_caps(self, ecdict_csv, tmp_path):
        stats = convert_ecdict(ecdict_csv, tmp_path / "capped", config=EcdictConfig(max_core=1))

        assert stats.core == 1

    def test_converted_files_feed_providers(self, ecdict_csv, tmp_path):
        output = tmp_path / "vocab"
        convert_ecdict(ecdict_csv, output)
        loader = JsonVocabularyLoader(output)
        unified = UnifiedVocabularyProvider(loader)
        frequency = FrequencyVocabularyProvider(loader)

        async def _init():
            await unified.initialize()
            await frequency.initialize()

        asyncio.run(_init())

        apple = unified.get_metadata("apple")
        assert apple.tags == frozenset({"zk", "gk", "cet4"})
        assert apple.frequency_rank == 1200
        assert apple.star_rating == 3
        assert apple.oxford is True
        assert unified.should_annotate("tacit", MatchOptions(target_tags=("toefl",)))
        assert frequency.get_metadata("the").frequency_rank == 1
