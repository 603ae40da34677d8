"""Tests for sentence-bounded context extraction."""

from __future__ import annotations

import pytest

from wordgloss.text.context import ContextExtractor, extract_context, sentence_boundaries

pytestmark = pytest.mark.text

SAMPLE = "A cat sat. The dog ran fast. It was sunny."


def test_sentence_boundaries_include_text_edges():
    boundaries = sentence_boundaries(SAMPLE)

    assert boundaries[0] == 0
    assert boundaries[-1] == len(SAMPLE)
    assert 11 in boundaries and 29 in boundaries


def test_extends_to_adjacent_sentences_within_budget():
    context = extract_context(SAMPLE, "dog", SAMPLE.index("dog"), max_length=100)

    assert "The dog ran fast." in context
    assert context == SAMPLE
    assert len(context) <= 100


def test_extension_stops_when_budget_is_exhausted():
    context = extract_context(SAMPLE, "dog", max_length=30)

    assert context == "A cat sat. The dog ran fast."


def test_single_sentence_when_neighbours_do_not_fit():
    context = extract_context(SAMPLE, "dog", max_length=20)

    assert context == "The dog ran fast."


def test_oversized_sentence_falls_back_to_character_window():
    words = "alpha bravo charlie delta echo foxtrot golf hotel india juliet kilo lima mike"
    limit = 20

    context = extract_context(words, "golf", words.index("golf"), max_length=limit)

    assert "golf" in context
    assert len(context) <= limit
    assert set(context.split()) <= set(words.split())


def test_target_longer_than_budget_is_truncated():
    text = "supercalifragilisticexpialidocious indeed"

    context = extract_context(text, "supercalifragilisticexpialidocious", 0, max_length=20)

    assert len(context) == 20


def test_cjk_characters_count_as_boundaries():
    text = "这是一个非常长的中文句子里面有一个英文单词apple然后继续写很多很多的中文内容直到超过限制为止"

    context = extract_context(text, "apple", max_length=20)

    assert "apple" in context
    assert len(context) <= 20


def test_missing_target_returns_leading_text():
    assert extract_context(SAMPLE, "elephant", max_length=10) == "A cat sat."
    assert extract_context("", "dog") == ""


def test_offset_selects_specific_occurrence():
    text = "The dog barked. Later the dog slept."
    extractor = ContextExtractor(max_length=20)

    assert extractor.extract(text, "dog", text.rindex("dog")) == "Later the dog slept."
    assert extractor.extract(text, "dog", 999) == "The dog barked."


def test_explicit_zero_budget_is_honoured():
    extractor = ContextExtractor(max_length=100)

    assert extractor.extract("The dog barked.", "dog", max_length=0) == ""
    assert extractor.extract("The dog barked.", "cat", max_length=0) == ""
