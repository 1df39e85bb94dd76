from __future__ import annotations

import pytest

from stashpy.domain.tagging import (
    MIN_CONFIDENCE_THRESHOLD,
    TagCatalog,
    TagDefinition,
    TagScoringEngine,
    default_tag_catalog,
    extract_words,
)
from stashpy.domain.tagging.scoring import calculate_confidence, keyword_matches

SCENARIO_TEXT = "I love machine learning and neural networks"


def test_score_empty_content_returns_nothing(small_catalog: TagCatalog) -> None:
    engine = TagScoringEngine(small_catalog)

    assert engine.score("") == []
    assert engine.score("   \n\t") == []
    assert engine.score(None) == []


def test_score_matches_ai_ml_definition(small_catalog: TagCatalog) -> None:
    # The default ai-ml definition has 34 keywords, so this text only clears 0.3 in a focused one.
    matches = TagScoringEngine(small_catalog).score(SCENARIO_TEXT)

    assert [match.tag_slug for match in matches] == ["ai-ml"]
    ai_ml = matches[0]
    assert ai_ml.tag_name == "ai/ml"
    assert ai_ml.confidence > MIN_CONFIDENCE_THRESHOLD
    assert "machine learning" in ai_ml.matched_keywords
    assert "neural network" in ai_ml.matched_keywords


def test_score_confidence_follows_formula(small_catalog: TagCatalog) -> None:
    [match] = TagScoringEngine(small_catalog).score(SCENARIO_TEXT)

    length_factor = 0.5 + (len(SCENARIO_TEXT) / 500) * 0.5
    expected = (1.0 * 0.7 + 0.2 * 0.3) * length_factor
    assert match.confidence == pytest.approx(expected)


def test_score_is_deterministic(small_catalog: TagCatalog) -> None:
    engine = TagScoringEngine(small_catalog)
    text = "Writing python code for a neural network and machine learning models"

    assert engine.score(text) == engine.score(text)


def test_score_sorts_by_confidence_descending(small_catalog: TagCatalog) -> None:
    text = "machine learning with a neural network in python code, " * 10

    matches = TagScoringEngine(small_catalog).score(text)

    assert [match.tag_slug for match in matches] == ["ai-ml", "coding"]
    confidences = [match.confidence for match in matches]
    assert confidences == sorted(confidences, reverse=True)


def test_score_keeps_catalog_order_for_ties() -> None:
    catalog = TagCatalog.of(
        [
            TagDefinition(name="second", slug="b-tag", keywords=("shared",)),
            TagDefinition(name="first", slug="a-tag", keywords=("shared",)),
        ]
    )

    matches = TagScoringEngine(catalog).score("shared " * 80)

    assert [match.tag_slug for match in matches] == ["b-tag", "a-tag"]


def test_score_never_returns_low_confidence_matches() -> None:
    engine = TagScoringEngine(default_tag_catalog())
    texts = [
        SCENARIO_TEXT,
        "A quick note about health, food and the gym.",
        "python " * 100,
        "design layout typography color palette figma sketch " * 5,
    ]

    for text in texts:
        for match in engine.score(text):
            assert match.confidence >= MIN_CONFIDENCE_THRESHOLD


def test_default_catalog_is_too_broad_for_a_short_sentence() -> None:
    matches = TagScoringEngine(default_tag_catalog()).score(SCENARIO_TEXT)

    assert "ai-ml" not in [match.tag_slug for match in matches]


def test_score_custom_threshold_keeps_weak_matches(small_catalog: TagCatalog) -> None:
    text = "learning from machine data"

    assert TagScoringEngine(small_catalog).score(text) == []
    [match] = TagScoringEngine(small_catalog, min_confidence=0.0).score(text)
    assert match.matched_keywords == ("machine learning",)


def test_engine_rejects_threshold_outside_unit_interval(small_catalog: TagCatalog) -> None:
    with pytest.raises(ValueError, match="min_confidence"):
        TagScoringEngine(small_catalog, min_confidence=1.5)


def test_matched_keywords_are_deduplicated() -> None:
    catalog = TagCatalog.of(
        [TagDefinition(name="design", slug="design", keywords=("figma", "figma", "sketch"))]
    )

    [match] = TagScoringEngine(catalog, min_confidence=0.0).score("figma " * 100)

    assert match.matched_keywords == ("figma",)
    assert match.confidence == pytest.approx(calculate_confidence(1, 3, len("figma " * 100)))


def test_extract_words_drops_short_tokens() -> None:
    assert extract_words("AI is a big-deal, ok? Neural_nets!") == ["big", "deal", "neural", "nets"]


def test_keyword_matches_substring() -> None:
    assert keyword_matches("neural network", "deep neural networks", frozenset())


def test_keyword_matches_words_in_any_order() -> None:
    words = frozenset(extract_words("learning from machine data"))

    assert keyword_matches("machine learning", "learning from machine data", words)


def test_keyword_matches_single_word_requires_substring() -> None:
    words = frozenset(extract_words("some other text"))

    assert not keyword_matches("python", "some other text", words)


def test_keyword_matches_ignores_short_parts() -> None:
    words = frozenset(extract_words("vision for computers"))

    assert not keyword_matches("ai ml", "vision for computers", words)


def test_calculate_confidence_bounds() -> None:
    assert calculate_confidence(0, 10, 100) == 0.0
    assert calculate_confidence(10, 10, 10_000) == pytest.approx(0.7 + 0.3 * 0.3)
    assert 0.0 <= calculate_confidence(50, 1, 10_000) <= 1.0
