"""
Local keyword extraction.

Two entry points:

extract_ranked_candidates(text, fingerprint, limit)
    Runs the six fingerprint-driven strategies, merges their candidates,
    de-duplicates case-insensitively (first candidate wins, scores are NOT
    combined) and returns the highest-scoring ``limit`` candidates.

detect_pattern_keywords(text, limit)
    The simpler regex detector: technical-term patterns plus a domain
    vocabulary, falling back to a list of common research words when
    nothing technical is present.

Each strategy is a pure function ``(text, fingerprint) -> List[CandidateKeyword]``.
"""
from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Iterable, List, Sequence, Set

from app.services.fingerprint import SemanticFingerprint
from app.services.vocabulary import (
    COMMON_IMPORTANT_WORDS,
    CROSS_SECTION_MIN_SECTIONS,
    CURATED_PHRASES,
    DOMAIN_TERMS,
    FIXED_VOCABULARY,
    FREQUENT_TERM_MIN_COUNT,
    IMPORTANCE_TOKEN,
    NGRAM_MIN_COUNT,
    STOP_PHRASES,
    STOP_WORDS,
    TECHNICAL_TERM_PATTERNS,
)
from app.utils.helpers import count_whole_word, extract_context

logger = logging.getLogger(__name__)

CONTEXT_CHARS = 100


@dataclass
class CandidateKeyword:
    """A keyword proposal from a single strategy, before merge and ranking."""

    word: str
    context: str
    score: float


Strategy = Callable[[str, SemanticFingerprint], List[CandidateKeyword]]


def _candidate(text: str, word: str, score: float) -> CandidateKeyword:
    return CandidateKeyword(
        word=word,
        context=extract_context(text, word, CONTEXT_CHARS),
        score=float(score),
    )


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def technical_term_strategy(
    text: str, fingerprint: SemanticFingerprint
) -> List[CandidateKeyword]:
    """Acronyms, technical suffixes, alphanumerics and compounds weighted by frequency."""
    seen: Set[str] = set()
    candidates: List[CandidateKeyword] = []
    for pattern, weight in TECHNICAL_TERM_PATTERNS:
        for match in pattern.findall(text):
            key = match.lower()
            if len(match) <= 2 or key in STOP_WORDS or key in seen:
                continue
            seen.add(key)
            frequency = fingerprint.word_frequency.get(key, 1)
            candidates.append(_candidate(text, match, weight * frequency))
    return candidates


def frequent_term_strategy(
    text: str, fingerprint: SemanticFingerprint
) -> List[CandidateKeyword]:
    """
    Words seen at least three times, scored from contextual importance.

    Words that never appear inside a detected section fall back to their
    raw frequency so documents without headings still rank by count.
    """
    candidates: List[CandidateKeyword] = []
    for word, count in fingerprint.word_frequency.items():
        if count < FREQUENT_TERM_MIN_COUNT or len(word) <= 3 or word in STOP_WORDS:
            continue
        importance = fingerprint.contextual_importance.get(word, count)
        display = word[0].upper() + word[1:]
        candidates.append(_candidate(text, display, importance * 0.5))
    return candidates


def cross_section_strategy(
    text: str, fingerprint: SemanticFingerprint
) -> List[CandidateKeyword]:
    """Words shared by at least two extracted sections."""
    section_count: Counter = Counter()
    for body in fingerprint.section_texts():
        section_count.update({w.lower() for w in IMPORTANCE_TOKEN.findall(body)})

    return [
        _candidate(text, word, count * 0.7)
        for word, count in section_count.items()
        if count >= CROSS_SECTION_MIN_SECTIONS and word not in STOP_WORDS
    ]


def fixed_vocabulary_strategy(
    text: str, fingerprint: SemanticFingerprint
) -> List[CandidateKeyword]:
    """Curated research / statistics vocabulary."""
    candidates: List[CandidateKeyword] = []
    for term in FIXED_VOCABULARY:
        matches = count_whole_word(text, term)
        if matches:
            candidates.append(_candidate(text, term, matches * 0.6))
    return candidates


def cluster_strategy(
    text: str, fingerprint: SemanticFingerprint
) -> List[CandidateKeyword]:
    """Members of every matched semantic cluster that occur in the text."""
    candidates: List[CandidateKeyword] = []
    for cluster in fingerprint.semantic_clusters:
        for term in cluster.terms:
            matches = count_whole_word(text, term)
            if matches:
                candidates.append(_candidate(text, term, matches * 0.4))
    return candidates


def phrase_strategy(
    text: str, fingerprint: SemanticFingerprint
) -> List[CandidateKeyword]:
    """Curated multi-word phrases plus repeated 2- and 3-word n-grams."""
    candidates: List[CandidateKeyword] = []
    curated: Set[str] = set()
    for phrases, weight in CURATED_PHRASES:
        for phrase in phrases:
            curated.add(phrase)
            frequency = count_whole_word(text, phrase)
            if frequency:
                candidates.append(_candidate(text, phrase, weight * frequency))

    for phrase, count in _repeated_ngrams(text).items():
        if phrase in curated:
            continue
        candidates.append(_candidate(text, phrase, count * 0.5))
    return candidates


def _repeated_ngrams(text: str) -> Counter:
    """2- and 3-grams of alphabetic words seen at least NGRAM_MIN_COUNT times."""
    words = [w.lower() for w in re.findall(r"[A-Za-z]+", text)]
    grams: Counter = Counter()
    for size in (2, 3):
        for i in range(len(words) - size + 1):
            gram = words[i:i + size]
            if any(len(w) < 3 for w in gram):
                continue
            if gram[0] in STOP_WORDS or gram[-1] in STOP_WORDS:
                continue
            phrase = " ".join(gram)
            if phrase in STOP_PHRASES:
                continue
            grams[phrase] += 1
    return Counter({p: c for p, c in grams.items() if c >= NGRAM_MIN_COUNT})


STRATEGIES: Sequence[Strategy] = (
    technical_term_strategy,
    frequent_term_strategy,
    cross_section_strategy,
    fixed_vocabulary_strategy,
    cluster_strategy,
    phrase_strategy,
)


# ---------------------------------------------------------------------------
# Merge and rank
# ---------------------------------------------------------------------------

def merge_candidates(groups: Iterable[List[CandidateKeyword]]) -> List[CandidateKeyword]:
    """
    Flatten strategy outputs, keeping only the first candidate per
    lower-cased word.  Later duplicates are discarded along with their score.
    """
    seen: Set[str] = set()
    merged: List[CandidateKeyword] = []
    for group in groups:
        for candidate in group:
            key = candidate.word.lower()
            if key in seen:
                continue
            seen.add(key)
            merged.append(candidate)
    return merged


def rank_candidates(
    candidates: List[CandidateKeyword], limit: int
) -> List[CandidateKeyword]:
    """Sort by descending score (stable on ties) and keep the top *limit*."""
    return sorted(candidates, key=lambda c: c.score, reverse=True)[:limit]


def extract_ranked_candidates(
    text: str,
    fingerprint: SemanticFingerprint,
    limit: int = 20,
    strategies: Sequence[Strategy] = STRATEGIES,
) -> List[CandidateKeyword]:
    """Run every strategy, merge first-seen-wins, rank, truncate."""
    if not text:
        return []
    groups = [strategy(text, fingerprint) for strategy in strategies]
    merged = merge_candidates(groups)
    ranked = rank_candidates(merged, limit)
    logger.debug(
        "extract_ranked_candidates: %d raw, %d unique, %d kept",
        sum(len(g) for g in groups),
        len(merged),
        len(ranked),
    )
    return ranked


def detect_pattern_keywords(
    text: str, fingerprint: SemanticFingerprint, limit: int = 50
) -> List[CandidateKeyword]:
    """
    Regex-only detection used by the quick keyword endpoint.

    Technical-term patterns first, then domain vocabulary; common research
    words are used only when neither produced anything.
    """
    if not text:
        return []

    technical = technical_term_strategy(text, fingerprint)
    domain: List[CandidateKeyword] = []
    seen: Set[str] = set()
    for match in DOMAIN_TERMS.findall(text):
        key = match.lower()
        if key in seen:
            continue
        seen.add(key)
        frequency = fingerprint.word_frequency.get(key, 1)
        domain.append(_candidate(text, match, 0.5 * frequency))

    merged = merge_candidates([technical, domain])
    if not merged:
        for word in COMMON_IMPORTANT_WORDS:
            count = count_whole_word(text, word)
            if count:
                merged.append(_candidate(text, word, 0.3 * count))
    return rank_candidates(merged, limit)
