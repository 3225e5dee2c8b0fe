"""
Semantic fingerprint of a cleaned document.

The fingerprint is computed once per analysis run and shared by every
keyword-extraction strategy and by the local definition fallback:

- sections               name -> body text for the six canonical sections
- word_frequency         lower-cased word -> count (letters only, len >= 3)
- technical_density      (acronyms + technical suffixes + alphanumerics) / words
- semantic_clusters      topical word groups with >= 2 members present
- contextual_importance  word -> occurrences in section text + sections containing it
- domain_indicators      domain labels whose pattern matches more than 3 times
"""
from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Tuple

from app.services.vocabulary import (
    ACRONYM,
    ALPHANUMERIC,
    DOMAIN_MIN_MATCHES,
    DOMAIN_PATTERNS,
    HEADING_LOOKAHEAD,
    IMPORTANCE_TOKEN,
    SECTION_LABELS,
    SEMANTIC_CLUSTERS,
    TECHNICAL_SUFFIX,
    WORD_TOKEN,
)
from app.utils.helpers import count_whole_word, safe_divide


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SemanticCluster:
    """A topical word group from the fixed taxonomy."""

    name: str
    terms: Tuple[str, ...]


@dataclass(frozen=True)
class SemanticFingerprint:
    """Read-only aggregate of structural and statistical signals."""

    sections: Mapping[str, str] = field(default_factory=dict)
    word_frequency: Mapping[str, int] = field(default_factory=dict)
    technical_density: float = 0.0
    semantic_clusters: Tuple[SemanticCluster, ...] = ()
    contextual_importance: Mapping[str, int] = field(default_factory=dict)
    domain_indicators: Tuple[str, ...] = ()

    def section_texts(self) -> List[str]:
        """Non-empty section bodies in canonical order."""
        return [body for body in self.sections.values() if body]


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

def build_fingerprint(text: str) -> SemanticFingerprint:
    """Derive a SemanticFingerprint from cleaned text."""
    sections = extract_sections(text)
    return SemanticFingerprint(
        sections=MappingProxyType(sections),
        word_frequency=MappingProxyType(word_frequency(text)),
        technical_density=technical_density(text),
        semantic_clusters=tuple(match_semantic_clusters(text)),
        contextual_importance=MappingProxyType(contextual_importance(sections)),
        domain_indicators=tuple(detect_domains(text)),
    )


def extract_sections(text: str) -> Dict[str, str]:
    """
    Locate each canonical section heading and capture its body up to the
    next heading-like line (or end of text).  Missing sections map to "".
    """
    sections: Dict[str, str] = {}
    for name, label in SECTION_LABELS.items():
        pattern = re.compile(
            r"^[ \t]*(?:\d+(?:\.\d+)*\.?[ \t]*|[IVX]+\.[ \t]*)?"
            r"(?i:" + label + r")"
            r"(?:[ \t]*[:.][ \t]*|[ \t]*\n)"
            r"(?P<body>[\s\S]*?)" + HEADING_LOOKAHEAD,
            re.MULTILINE,
        )
        match = pattern.search(text)
        sections[name] = match.group("body").strip() if match else ""
    return sections


def word_frequency(text: str) -> Dict[str, int]:
    """Case-insensitive counts of alphabetic words of length >= 3."""
    return dict(Counter(w.lower() for w in WORD_TOKEN.findall(text)))


def technical_density(text: str) -> float:
    """Share of technical tokens among all whitespace-separated words, in [0, 1]."""
    total_words = len(text.split())
    technical = (
        len(ACRONYM.findall(text))
        + len(TECHNICAL_SUFFIX.findall(text))
        + len(ALPHANUMERIC.findall(text))
    )
    return min(1.0, safe_divide(technical, total_words))


def match_semantic_clusters(text: str) -> List[SemanticCluster]:
    """Clusters from the fixed taxonomy with at least two members present."""
    matched: List[SemanticCluster] = []
    for name, terms in SEMANTIC_CLUSTERS.items():
        present = sum(1 for term in terms if count_whole_word(text, term) > 0)
        if present >= 2:
            matched.append(SemanticCluster(name=name, terms=terms))
    return matched


def contextual_importance(sections: Mapping[str, str]) -> Dict[str, int]:
    """
    Score words (len >= 4) found in the extracted sections.

    score = occurrences across all section text + number of sections that
    contain the word.
    """
    bodies = [body for body in sections.values() if body]
    if not bodies:
        return {}

    occurrences = Counter(
        w.lower() for w in IMPORTANCE_TOKEN.findall(" ".join(bodies))
    )
    section_hits: Counter = Counter()
    for body in bodies:
        section_hits.update({w.lower() for w in IMPORTANCE_TOKEN.findall(body)})

    return {word: count + section_hits[word] for word, count in occurrences.items()}


def detect_domains(text: str) -> List[str]:
    """Domain labels whose pattern matches more than DOMAIN_MIN_MATCHES times."""
    return [
        label
        for label, pattern in DOMAIN_PATTERNS.items()
        if len(pattern.findall(text)) > DOMAIN_MIN_MATCHES
    ]
