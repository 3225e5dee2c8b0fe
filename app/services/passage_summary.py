"""
Plain-language summaries of a passage the reader highlighted.

The local summary is assembled from a handful of regex observations about
the passage (what kind of passage it is, whether it carries numbers,
acronyms or technical vocabulary) and about the text around it (subject
area, which section of the paper it came from).
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from app.services.errors import require_text
from app.services.llm_client import OllamaLLMService
from app.services.vocabulary import (
    ACRONYM,
    CONTEXT_SECTION_TYPES,
    DOMAIN_PATTERNS,
    PASSAGE_KINDS,
    RESEARCH_PATTERN,
    TECHNICAL_SUFFIX,
)

logger = logging.getLogger(__name__)

_KIND_PHRASES = {
    "definition": "provides a definition or explanation of a concept.",
    "explanation": "explains the reasoning or cause behind something.",
    "comparison": "compares different concepts, methods, or results.",
    "process": "describes a process, procedure, or methodology.",
    "result": "presents findings, results, or conclusions.",
}

_KIND_IMPLICATIONS = {
    "process": "This information may be useful for understanding procedures or outcomes.",
    "result": "This information may be useful for understanding procedures or outcomes.",
    "definition": "This information helps clarify concepts and terminology.",
    "explanation": "This information helps clarify concepts and terminology.",
    "comparison": "This information helps distinguish between different approaches or results.",
}


@dataclass
class PassageAnalysis:
    word_count: int
    sentence_count: int
    kind: str
    indicators: List[str]
    domain: str = "General"
    section_type: str = "general"


@dataclass
class PassageSummary:
    summary: str
    source: str

    @property
    def fallback(self) -> bool:
        return self.source != "llm"


def identify_domain(context: str) -> str:
    for domain, pattern in DOMAIN_PATTERNS.items():
        if pattern.search(context):
            return domain
    if RESEARCH_PATTERN.search(context):
        return "Research"
    return "General"


def identify_section_type(context: str) -> str:
    for section_type, pattern in CONTEXT_SECTION_TYPES:
        if pattern.search(context):
            return section_type
    return "general"


def analyze_passage(text: str, context: str = "") -> PassageAnalysis:
    text = text.strip()
    kind = next((k for k, pattern in PASSAGE_KINDS if pattern.search(text)), "general")

    indicators: List[str] = []
    if TECHNICAL_SUFFIX.search(text) or re.search(r"[A-Z]{2,}", text):
        indicators.append("technical terminology")
    if ACRONYM.search(text):
        indicators.append("acronyms")
    if re.search(r"\b\w*\d+\w*\b", text):
        indicators.append("scientific notation")
    if re.search(r"\d", text):
        indicators.append("numerical data")

    context = (context or "").strip()
    return PassageAnalysis(
        word_count=len(text.split()),
        sentence_count=len([s for s in re.split(r"[.!?]+", text) if s.strip()]),
        kind=kind,
        indicators=indicators,
        domain=identify_domain(context) if context else "General",
        section_type=identify_section_type(context) if context else "general",
    )


def semantic_summary(text: str, context: str = "") -> str:
    """Describe *text* from its observable features, without an LLM."""
    analysis = analyze_passage(text, context)

    parts: List[str] = []
    opener = (
        f"This {analysis.domain.lower()} content"
        if analysis.domain != "General"
        else "This text"
    )
    parts.append(
        f"{opener} {_KIND_PHRASES.get(analysis.kind, 'contains information about a topic.')}"
    )
    if analysis.indicators:
        parts.append(f"It includes {', '.join(analysis.indicators)}.")

    if analysis.word_count > 50:
        parts.append("This is a detailed explanation.")
    elif analysis.word_count > 20:
        parts.append("This is a moderate-length explanation.")
    else:
        parts.append("This is a brief explanation.")

    if analysis.section_type != "general":
        parts.append(
            f"The content appears to be from the {analysis.section_type} section of a document."
        )
    implication = _KIND_IMPLICATIONS.get(analysis.kind)
    if implication:
        parts.append(implication)
    return " ".join(parts)


_PASSAGE_SYSTEM = (
    "You are a helpful assistant that provides clear, concise explanations of "
    "text content. Make complex concepts accessible and understandable."
)

_PASSAGE_PROMPT = """\
Explain the following highlighted text in simple terms, in 2-3 sentences.
Cover what it describes, the key concepts it mentions and why it matters.

Highlighted text: "{text}"
{context_line}
Summary:\
"""


class PassageSummarizer:
    """LLM-first passage summaries with ``semantic_summary`` as fallback."""

    PROMPT = _PASSAGE_PROMPT
    SYSTEM = _PASSAGE_SYSTEM

    def __init__(self, llm: Optional[OllamaLLMService] = None) -> None:
        self.llm = llm

    async def summarize(self, text: str, context: str = "") -> PassageSummary:
        require_text(text)
        context = context or ""

        if self.llm is not None and self.llm.is_enabled:
            context_line = f"Context: {context[:1500]}\n" if context.strip() else ""
            response = await self.llm.generate(
                self.PROMPT.format(text=text[:3000], context_line=context_line),
                system=self.SYSTEM,
                max_tokens=200,
                temperature=0.7,
            )
            summary = response.strip()
            if summary:
                return PassageSummary(summary, "llm")
            logger.info("summarize_passage: LLM unavailable, using semantic summary")

        return PassageSummary(semantic_summary(text, context), "local")
