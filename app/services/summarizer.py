"""
Document summaries.

``compose_summary`` builds a structured summary from descriptive statistics
and a few marker-word heuristics.  ``DocumentSummarizer`` adds the summary
cache and an optional LLM pass on top of it, the same way the sentiment
analyser does.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from app.services.analysis_cache import AnalysisCache, AnalysisOutcome
from app.services.errors import require_text
from app.services.llm_client import OllamaLLMService
from app.services.vocabulary import (
    DEFAULT_DOCUMENT_TYPE,
    DOCUMENT_TYPE_MARKERS,
    WORDS_PER_MINUTE,
)
from app.utils.helpers import string_list

logger = logging.getLogger(__name__)

COMPLEXITY_LEVELS = ("beginner", "intermediate", "advanced")

TARGET_AUDIENCES = {
    "beginner": "General readers",
    "intermediate": "Professionals and students",
    "advanced": "Specialists and researchers",
}

DEFAULT_CONCEPTS = ["Content analysis", "Text processing", "Document review"]
DEFAULT_APPLICATIONS = [
    "Research and analysis",
    "Educational purposes",
    "Professional reference",
]


@dataclass
class DocumentStatistics:
    word_count: int
    sentence_count: int
    paragraph_count: int
    reading_time_minutes: int


@dataclass
class DocumentSummary:
    main_topic: str
    key_findings: List[str] = field(default_factory=list)
    methodology: str = ""
    important_concepts: List[str] = field(default_factory=list)
    target_audience: str = ""
    practical_applications: List[str] = field(default_factory=list)
    document_type: str = DEFAULT_DOCUMENT_TYPE
    summary: str = ""
    reading_time: str = ""
    complexity: str = "intermediate"


def compute_statistics(text: str) -> DocumentStatistics:
    words = text.split()
    sentences = [s for s in re.split(r"[.!?]+", text) if s.strip()]
    paragraphs = [p for p in re.split(r"\n\s*\n", text) if p.strip()]
    return DocumentStatistics(
        word_count=len(words),
        sentence_count=len(sentences),
        paragraph_count=len(paragraphs),
        reading_time_minutes=math.ceil(len(words) / WORDS_PER_MINUTE),
    )


def classify_document_type(text: str) -> str:
    lowered = text.lower()
    for first, second, label in DOCUMENT_TYPE_MARKERS:
        if first in lowered and second in lowered:
            return label
    return DEFAULT_DOCUMENT_TYPE


def classify_complexity(word_count: int, keyword_count: int = 0) -> str:
    if word_count < 500:
        return "beginner"
    if word_count > 2000 or keyword_count > 10:
        return "advanced"
    return "intermediate"


def format_reading_time(minutes: int) -> str:
    return f"{minutes} minute{'' if minutes == 1 else 's'}"


def compose_summary(text: str, keywords: Optional[Sequence[str]] = None) -> DocumentSummary:
    """Local summary of *text*; *keywords* are display words, most important first."""
    keywords = [k for k in (keywords or []) if k]
    stats = compute_statistics(text)
    document_type = classify_document_type(text)
    complexity = classify_complexity(stats.word_count, len(keywords))
    concepts = list(keywords[:5])

    first_paragraph = text.split("\n\n")[0] or text[:300]
    overview = (
        f"This {document_type.lower()} contains {stats.word_count} words across "
        f"{stats.paragraph_count} paragraphs. {first_paragraph[:200]}..."
    )

    return DocumentSummary(
        main_topic=", ".join(concepts) if concepts else "General topic",
        key_findings=[
            f"Document contains {stats.word_count} words of content",
            f"Identified {len(keywords)} key terms and concepts",
            f"Structured in {stats.paragraph_count} main sections",
        ],
        methodology="Text analysis and keyword extraction",
        important_concepts=concepts or list(DEFAULT_CONCEPTS),
        target_audience=TARGET_AUDIENCES[complexity],
        practical_applications=list(DEFAULT_APPLICATIONS),
        document_type=document_type,
        summary=overview,
        reading_time=format_reading_time(stats.reading_time_minutes),
        complexity=complexity,
    )


_SUMMARY_SYSTEM = (
    "You are an expert document analyst. Provide accurate, structured summaries "
    "that help readers quickly understand complex documents. Always respond with "
    "valid JSON."
)

_SUMMARY_PROMPT = """\
Analyze this document and provide a comprehensive summary. The document appears
to be about: {topics}.

Document text (first 4000 characters):
---
{text}
---

Respond ONLY with a JSON object with these exact keys:
{{
  "mainTopic": "string",
  "keyFindings": ["string", "string", "string"],
  "methodology": "string",
  "importantConcepts": ["string", "string", "string", "string", "string"],
  "targetAudience": "string",
  "practicalApplications": ["string", "string", "string"],
  "documentType": "string",
  "summary": "2-3 paragraph executive summary",
  "readingTime": "estimated reading time",
  "complexity": "beginner|intermediate|advanced"
}}\
"""

_SUMMARY_RETRY_PROMPT = """\
Return ONLY a JSON object summarising this text with keys mainTopic, keyFindings,
methodology, importantConcepts, targetAudience, practicalApplications,
documentType, summary, readingTime, complexity:
{text}\
"""


class DocumentSummarizer:
    """Cached document summaries with an optional LLM pass."""

    PROMPT = _SUMMARY_PROMPT
    RETRY_PROMPT = _SUMMARY_RETRY_PROMPT
    SYSTEM = _SUMMARY_SYSTEM

    def __init__(self, cache: AnalysisCache, llm: Optional[OllamaLLMService] = None) -> None:
        self.cache = cache
        self.llm = llm

    async def summarize(
        self,
        text: str,
        keywords: Optional[Sequence[str]] = None,
        force_regenerate: bool = False,
    ) -> AnalysisOutcome:
        require_text(text)

        if not force_regenerate:
            cached = self.cache.get(text)
            if cached is not None:
                logger.info("summarize_document: served from cache")
                return AnalysisOutcome(data=cached, source="cache", cached=True)

        result, source = await self._compute(text, keywords)
        self.cache.set(text, result)
        return AnalysisOutcome(data=result, source=source)

    async def _compute(
        self, text: str, keywords: Optional[Sequence[str]]
    ) -> "tuple[DocumentSummary, str]":
        if self.llm is None or not self.llm.is_enabled:
            return compose_summary(text, keywords), "local"

        excerpt = text[:4000]
        topics = ", ".join(keywords) if keywords else "various topics"
        response = await self.llm.generate(
            self.PROMPT.format(topics=topics, text=excerpt),
            system=self.SYSTEM,
            max_tokens=1000,
            temperature=0.3,
        )
        if not response:
            logger.info("summarize_document: LLM unavailable, falling back to local summary")
            return compose_summary(text, keywords), "local"

        ok, parsed = self.llm.parse_json_robust(response)
        if not ok or not isinstance(parsed, dict):
            ok, parsed = await self.llm.generate_json(
                self.RETRY_PROMPT.format(text=excerpt[:2000]), system=self.SYSTEM
            )
        if ok and isinstance(parsed, dict):
            return _from_llm(parsed, compose_summary(text, keywords)), "llm"

        logger.warning("summarize_document: unparseable LLM output, reconstructing locally")
        return compose_summary(text, keywords), "local-reconstructed"


def _padded(items: List[str], fallback: Sequence[str], size: int) -> List[str]:
    """Top *items* up to *size* entries from *fallback*, skipping repeats."""
    result = list(items[:size])
    for item in fallback:
        if len(result) >= size:
            break
        if item not in result:
            result.append(item)
    return result


def _from_llm(raw: Dict[str, Any], local: DocumentSummary) -> DocumentSummary:
    """Validate LLM JSON, filling gaps from the local summary."""
    complexity = str(raw.get("complexity", "")).lower().strip()
    if complexity not in COMPLEXITY_LEVELS:
        complexity = local.complexity

    return DocumentSummary(
        main_topic=str(raw.get("mainTopic") or local.main_topic),
        key_findings=_padded(string_list(raw.get("keyFindings"), 3), local.key_findings, 3),
        methodology=str(raw.get("methodology") or local.methodology),
        important_concepts=string_list(raw.get("importantConcepts"), 5)
        or local.important_concepts,
        target_audience=str(raw.get("targetAudience") or local.target_audience),
        practical_applications=_padded(
            string_list(raw.get("practicalApplications"), 3), local.practical_applications, 3
        ),
        document_type=str(raw.get("documentType") or local.document_type),
        summary=str(raw.get("summary") or local.summary),
        reading_time=local.reading_time,
        complexity=complexity,
    )
