"""
Analysis facade.

Ties the pipeline stages together:

    clean_text -> build_fingerprint -> keyword strategies -> DefinitionProvider

and owns the two result caches (sentiment, summary), the sentiment analyser,
the summariser, the concept-map builder and the reader helpers (term
lookup, passage summaries, document chat).  One instance is created per
process by ``app.dependencies.analysis.get_analysis_service``.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

from app.config import Settings, settings as default_settings
from app.services.analysis_cache import AnalysisCache, AnalysisOutcome, Clock
from app.services.chat import ChatReply, DocumentChat
from app.services.concept_map import ConceptMap, ConceptMapBuilder
from app.services.definitions import DefinitionProvider, build_definition_provider
from app.services.errors import require_text
from app.services.fingerprint import build_fingerprint
from app.services.keyword_extractor import (
    detect_pattern_keywords,
    extract_ranked_candidates,
)
from app.services.llm_client import OllamaLLMService
from app.services.passage_summary import PassageSummarizer, PassageSummary
from app.services.sentiment import SentimentAnalyzer
from app.services.summarizer import DocumentSummarizer
from app.services.term_lookup import TermDefiner, TermDefinition
from app.services.text_cleaner import clean_text

logger = logging.getLogger(__name__)


@dataclass
class Keyword:
    word: str
    definition: str
    context: str
    is_from_external_source: bool = False
    score: float = 0.0


class AnalysisService:
    """Entry point for every text analysis the API offers."""

    def __init__(
        self,
        llm: Optional[OllamaLLMService] = None,
        config: Optional[Settings] = None,
        clock: Clock = time.monotonic,
        definition_provider: Optional[DefinitionProvider] = None,
    ) -> None:
        config = config or default_settings
        self.llm = llm
        self.max_keywords = config.MAX_KEYWORDS
        self.local_keyword_limit = config.LOCAL_KEYWORD_LIMIT

        self.sentiment_cache = AnalysisCache(
            "sentiment",
            config.ANALYSIS_CACHE_TTL_SECONDS,
            config.ANALYSIS_CACHE_MAX_ENTRIES,
            clock=clock,
        )
        self.summary_cache = AnalysisCache(
            "summary",
            config.ANALYSIS_CACHE_TTL_SECONDS,
            config.ANALYSIS_CACHE_MAX_ENTRIES,
            clock=clock,
        )
        self.definitions = definition_provider or build_definition_provider(llm)
        self.sentiment = SentimentAnalyzer(self.sentiment_cache, llm)
        self.summarizer = DocumentSummarizer(self.summary_cache, llm)
        self.concept_maps = ConceptMapBuilder(llm)
        self.term_definer = TermDefiner(llm)
        self.passage_summarizer = PassageSummarizer(llm)
        self.chat_assistant = DocumentChat(llm)

    # ------------------------------------------------------------------
    # Keywords
    # ------------------------------------------------------------------

    def detect_keywords(self, text: str) -> List[Keyword]:
        """Quick regex keywords, no definitions."""
        require_text(text)
        cleaned = clean_text(text)
        if not cleaned:
            return []
        fingerprint = build_fingerprint(cleaned)
        candidates = detect_pattern_keywords(cleaned, fingerprint, self.local_keyword_limit)
        return [
            Keyword(word=c.word, definition="", context=c.context, score=c.score)
            for c in candidates
        ]

    async def analyze_semantic_fingerprint_keywords(self, text: str) -> List[Keyword]:
        """Full pipeline: ranked keywords, each with a definition."""
        require_text(text)
        cleaned = clean_text(text)
        if not cleaned:
            logger.info("analyze_keywords: nothing left after cleaning")
            return []

        fingerprint = build_fingerprint(cleaned)
        candidates = extract_ranked_candidates(cleaned, fingerprint, self.max_keywords)
        definitions = await asyncio.gather(
            *(self.definitions.define(c.word, cleaned, fingerprint) for c in candidates)
        )
        logger.info(
            "analyze_keywords: %d keywords, domains=%s",
            len(candidates),
            list(fingerprint.domain_indicators),
        )
        return [
            Keyword(
                word=candidate.word,
                definition=definition.text,
                context=candidate.context,
                is_from_external_source=definition.is_from_external_source,
                score=candidate.score,
            )
            for candidate, definition in zip(candidates, definitions)
        ]

    # ------------------------------------------------------------------
    # Sentiment, summary, concept map
    # ------------------------------------------------------------------

    async def analyze_sentiment(
        self, text: str, force_regenerate: bool = False
    ) -> AnalysisOutcome:
        return await self.sentiment.analyze(text, force_regenerate=force_regenerate)

    async def summarize_document(
        self,
        text: str,
        keywords: Optional[Sequence[str]] = None,
        force_regenerate: bool = False,
    ) -> AnalysisOutcome:
        return await self.summarizer.summarize(
            text, keywords=keywords, force_regenerate=force_regenerate
        )

    async def generate_concept_map(self, text: str, keywords: Sequence[str]) -> ConceptMap:
        return await self.concept_maps.build(text, keywords)

    # ------------------------------------------------------------------
    # Reader helpers
    # ------------------------------------------------------------------

    async def define_term(
        self, term: str, context: str = "", general: bool = False
    ) -> TermDefinition:
        return await self.term_definer.define(term, context, general=general)

    async def summarize_passage(self, text: str, context: str = "") -> PassageSummary:
        return await self.passage_summarizer.summarize(text, context)

    async def chat(self, message: str, context: str) -> ChatReply:
        return await self.chat_assistant.reply(message, context)
