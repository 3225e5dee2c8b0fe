"""Tests for the keyword extraction strategies, merge and ranking."""
from app.services.fingerprint import build_fingerprint
from app.services.keyword_extractor import (
    CandidateKeyword,
    cross_section_strategy,
    detect_pattern_keywords,
    extract_ranked_candidates,
    fixed_vocabulary_strategy,
    frequent_term_strategy,
    merge_candidates,
    rank_candidates,
    technical_term_strategy,
)
from app.services.text_cleaner import clean_text
from tests.conftest import SAMPLE_TEXT

ALGORITHM_TEXT = (
    "The ALGORITHM uses ALGORITHM for classification. "
    "ALGORITHM improves ALGORITHM accuracy."
)


def _assert_unique_and_sorted(candidates):
    words = [c.word.lower() for c in candidates]
    assert len(words) == len(set(words))
    scores = [c.score for c in candidates]
    assert scores == sorted(scores, reverse=True)


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def test_technical_terms_weighted_by_frequency():
    text = "The API returns JSON. The API is fast. Use the gpt4 model-based tool."
    candidates = {c.word: c.score for c in technical_term_strategy(text, build_fingerprint(text))}

    assert candidates["API"] == 0.9 * 2
    assert candidates["JSON"] == 0.9
    assert candidates["gpt4"] == 0.7
    assert candidates["model-based"] == 0.6


def test_frequent_terms_are_capitalised():
    text = "graph graph graph tree"
    candidates = frequent_term_strategy(text, build_fingerprint(text))

    assert [c.word for c in candidates] == ["Graph"]
    # no sections, so the raw count stands in for contextual importance
    assert candidates[0].score == 3 * 0.5


def test_cross_section_terms():
    fingerprint = build_fingerprint(SAMPLE_TEXT)
    words = {c.word: c.score for c in cross_section_strategy(SAMPLE_TEXT, fingerprint)}

    assert words["algorithm"] >= 2 * 0.7
    assert "the" not in words


def test_fixed_vocabulary_counts_whole_words():
    text = "A regression model. Another regression. Clustering too."
    words = {c.word: c.score for c in fixed_vocabulary_strategy(text, build_fingerprint(text))}

    assert words["regression"] == 2 * 0.6
    assert words["clustering"] == 0.6


def test_candidate_context_surrounds_first_occurrence():
    text = "x" * 300 + " neural network " + "y" * 300
    candidate = technical_term_strategy("NASA " + text, build_fingerprint(text))[0]
    assert candidate.word == "NASA"
    assert candidate.context.startswith("NASA")
    assert len(candidate.context) <= 100 + len("NASA") + 100


# ---------------------------------------------------------------------------
# Merge and rank
# ---------------------------------------------------------------------------

def test_merge_keeps_first_candidate_and_its_score():
    first = [CandidateKeyword("Graph", "first context", 0.5)]
    second = [CandidateKeyword("graph", "second context", 9.0), CandidateKeyword("tree", "", 1.0)]

    merged = merge_candidates([first, second])

    assert [c.word for c in merged] == ["Graph", "tree"]
    assert merged[0].score == 0.5
    assert merged[0].context == "first context"


def test_rank_sorts_descending_and_truncates():
    candidates = [CandidateKeyword(f"w{i}", "", float(i)) for i in range(30)]
    ranked = rank_candidates(candidates, 20)

    assert len(ranked) == 20
    assert ranked[0].word == "w29"
    _assert_unique_and_sorted(ranked)


# ---------------------------------------------------------------------------
# End to end
# ---------------------------------------------------------------------------

def test_repeated_word_appears_once_with_frequency_score():
    cleaned = clean_text(ALGORITHM_TEXT)
    fingerprint = build_fingerprint(cleaned)

    quick = detect_pattern_keywords(cleaned, fingerprint)
    algorithm = [c for c in quick if c.word.lower() == "algorithm"]
    assert len(algorithm) == 1
    assert algorithm[0].score == 0.5 * 4
    assert quick[0].word == "ALGORITHM"

    ranked = extract_ranked_candidates(cleaned, fingerprint)
    algorithm = [c for c in ranked if c.word.lower() == "algorithm"]
    assert len(algorithm) == 1
    assert algorithm[0].score == 4 * 0.5
    _assert_unique_and_sorted(ranked)


def test_fingerprint_keywords_bounded_unique_sorted():
    long_text = SAMPLE_TEXT * 3 + " ".join(f"TERM{i} XY{i}Z" for i in range(60))
    cleaned = clean_text(long_text)
    ranked = extract_ranked_candidates(cleaned, build_fingerprint(cleaned), limit=20)

    assert 0 < len(ranked) <= 20
    _assert_unique_and_sorted(ranked)


def test_pattern_keywords_bounded_by_limit():
    text = " ".join(f"AB{i}" for i in range(80))
    candidates = detect_pattern_keywords(text, build_fingerprint(text), limit=50)

    assert len(candidates) == 50
    _assert_unique_and_sorted(candidates)


def test_pattern_keywords_fall_back_to_common_words():
    text = "our research and the study process"
    words = [c.word for c in detect_pattern_keywords(text, build_fingerprint(text))]
    assert "research" in words
    assert "process" in words


def test_empty_text_yields_no_keywords():
    cleaned = clean_text("References: [1] Smith et al.")
    fingerprint = build_fingerprint(cleaned)

    assert cleaned == ""
    assert extract_ranked_candidates(cleaned, fingerprint) == []
    assert detect_pattern_keywords(cleaned, fingerprint) == []
