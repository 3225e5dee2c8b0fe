"""
Document sentiment analysis.

``score_sentiment`` is the deterministic local algorithm: every whitespace
token is tested (substring containment) against curated positive, negative
and neutral vocabularies, and the ratios drive the score, label, tone and
confidence.

``SentimentAnalyzer`` wraps it with the content-hash cache and an optional
LLM pass whose JSON is validated and clamped before use.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from app.services.analysis_cache import AnalysisCache, AnalysisOutcome
from app.services.errors import require_text
from app.services.llm_client import OllamaLLMService
from app.services.vocabulary import (
    EMOTIONAL_TONES,
    NEGATIVE_WORDS,
    NEUTRAL_WORDS,
    POSITIVE_WORDS,
)
from app.utils.helpers import clamp, string_list

logger = logging.getLogger(__name__)

SENTIMENT_LABELS = ("positive", "negative", "neutral", "mixed")


@dataclass
class SectionSentiment:
    section: str
    sentiment: str
    score: float


@dataclass
class SentimentResult:
    overall_sentiment: str
    sentiment_score: float
    emotional_tone: str
    confidence: float
    key_indicators: List[str] = field(default_factory=list)
    section_breakdown: List[SectionSentiment] = field(default_factory=list)
    audience_perception: str = ""
    summary: str = ""


# ---------------------------------------------------------------------------
# Local algorithm
# ---------------------------------------------------------------------------

def classify_sentiment(score: float, positive_ratio: float, negative_ratio: float) -> str:
    """
    Map a score to a label.

    "mixed" is checked only after both thresholds, so it can only appear
    when the score already sits in [-0.1, 0.1].
    """
    if score > 0.1:
        return "positive"
    if score < -0.1:
        return "negative"
    if abs(positive_ratio - negative_ratio) < 0.05:
        return "mixed"
    return "neutral"


def score_sentiment(text: str) -> SentimentResult:
    """Keyword-ratio sentiment of *text*."""
    tokens = text.lower().split()
    total = max(len(tokens), 1)

    positive = negative = neutral = 0
    for token in tokens:
        if any(word in token for word in POSITIVE_WORDS):
            positive += 1
        if any(word in token for word in NEGATIVE_WORDS):
            negative += 1
        if any(word in token for word in NEUTRAL_WORDS):
            neutral += 1

    positive_ratio = positive / total
    negative_ratio = negative / total

    score = max(-1.0, min(1.0, (positive_ratio - negative_ratio) * 2))
    label = classify_sentiment(score, positive_ratio, negative_ratio)
    tone = EMOTIONAL_TONES[label]
    confidence = min(95.0, max(60.0, abs(positive_ratio - negative_ratio) * 200 + 60))

    indicators: List[str] = []
    if positive:
        indicators.append("Contains positive language")
    if negative:
        indicators.append("Contains critical language")
    if neutral:
        indicators.append("Uses neutral, academic tone")

    return SentimentResult(
        overall_sentiment=label,
        sentiment_score=round(score, 2),
        emotional_tone=tone,
        confidence=float(round(confidence)),
        key_indicators=indicators or ["Academic and professional tone"],
        section_breakdown=[
            SectionSentiment(section="Overall Document", sentiment=label, score=score)
        ],
        audience_perception=(
            f"The document appears to have a {tone} tone that would be "
            f"perceived as {label} by readers."
        ),
        summary=(
            f"This document demonstrates a {label} sentiment with a {tone} tone. "
            f"The analysis shows {positive} positive indicators, {negative} "
            f"negative indicators, and {neutral} neutral terms."
        ),
    )


# ---------------------------------------------------------------------------
# LLM + cache
# ---------------------------------------------------------------------------

_SENTIMENT_SYSTEM = (
    "You are an expert NLP analyst specializing in sentiment analysis. Provide "
    "accurate, detailed sentiment analysis with specific scores and evidence. "
    "Always respond with valid JSON."
)

_SENTIMENT_PROMPT = """\
Analyze the sentiment and emotional tone of this document.

Document text (first 3000 characters):
---
{text}
---

Respond ONLY with a JSON object with these exact keys:
{{
  "overallSentiment": "positive|negative|neutral|mixed",
  "sentimentScore": -1.0 to 1.0,
  "emotionalTone": "short description",
  "confidence": 0 to 100,
  "keyIndicators": ["...", "...", "..."],
  "sectionBreakdown": [{{"section": "...", "sentiment": "...", "score": 0.0}}],
  "audiencePerception": "how readers might perceive the tone",
  "summary": "2-3 sentence summary of the sentiment analysis"
}}\
"""

_SENTIMENT_RETRY_PROMPT = """\
Return ONLY a JSON object describing the sentiment of this text, nothing else:
{text}

{{"overallSentiment": "neutral", "sentimentScore": 0.0, "emotionalTone": "professional", \
"confidence": 70, "keyIndicators": [], "sectionBreakdown": [], \
"audiencePerception": "...", "summary": "..."}}\
"""


class SentimentAnalyzer:
    """Cached sentiment analysis with an optional LLM pass."""

    PROMPT = _SENTIMENT_PROMPT
    RETRY_PROMPT = _SENTIMENT_RETRY_PROMPT
    SYSTEM = _SENTIMENT_SYSTEM

    def __init__(self, cache: AnalysisCache, llm: Optional[OllamaLLMService] = None) -> None:
        self.cache = cache
        self.llm = llm

    async def analyze(self, text: str, force_regenerate: bool = False) -> AnalysisOutcome:
        require_text(text)

        if not force_regenerate:
            cached = self.cache.get(text)
            if cached is not None:
                logger.info("analyze_sentiment: served from cache")
                return AnalysisOutcome(data=cached, source="cache", cached=True)

        result, source = await self._compute(text)
        self.cache.set(text, result)
        return AnalysisOutcome(data=result, source=source)

    async def _compute(self, text: str) -> "tuple[SentimentResult, str]":
        if self.llm is None or not self.llm.is_enabled:
            return score_sentiment(text), "local"

        excerpt = text[:3000]
        response = await self.llm.generate(
            self.PROMPT.format(text=excerpt), system=self.SYSTEM, max_tokens=800, temperature=0.2
        )
        if not response:
            logger.info("analyze_sentiment: LLM unavailable, falling back to local analysis")
            return score_sentiment(text), "local"

        ok, parsed = self.llm.parse_json_robust(response)
        if not ok or not isinstance(parsed, dict):
            ok, parsed = await self.llm.generate_json(
                self.RETRY_PROMPT.format(text=excerpt), system=self.SYSTEM, max_tokens=800
            )
        if ok and isinstance(parsed, dict):
            local = score_sentiment(text)
            try:
                return _from_llm(parsed, local), "llm"
            except (TypeError, ValueError, AttributeError) as exc:
                logger.warning(
                    "analyze_sentiment: invalid LLM result (%s), reconstructing locally", exc
                )
                return local, "local-reconstructed"

        logger.warning("analyze_sentiment: unparseable LLM output, reconstructing locally")
        return score_sentiment(text), "local-reconstructed"


def _from_llm(raw: Dict[str, Any], local: SentimentResult) -> SentimentResult:
    """Validate LLM JSON, filling gaps from the local result."""
    label = str(raw.get("overallSentiment", "")).lower().strip()
    if label not in SENTIMENT_LABELS:
        label = local.overall_sentiment

    sections = raw.get("sectionBreakdown")
    breakdown: List[SectionSentiment] = []
    for item in sections if isinstance(sections, list) else []:
        if not isinstance(item, dict):
            continue
        breakdown.append(
            SectionSentiment(
                section=str(item.get("section", "")).strip() or "Section",
                sentiment=str(item.get("sentiment", label)).strip() or label,
                score=clamp(item.get("score", 0.0), -1.0, 1.0, 0.0),
            )
        )

    indicators = string_list(raw.get("keyIndicators"))

    return SentimentResult(
        overall_sentiment=label,
        sentiment_score=clamp(raw.get("sentimentScore"), -1.0, 1.0, local.sentiment_score),
        emotional_tone=str(raw.get("emotionalTone") or EMOTIONAL_TONES[label]),
        confidence=clamp(raw.get("confidence"), 0.0, 100.0, local.confidence),
        key_indicators=indicators or local.key_indicators,
        section_breakdown=breakdown or local.section_breakdown,
        audience_perception=str(raw.get("audiencePerception") or local.audience_perception),
        summary=str(raw.get("summary") or local.summary),
    )
