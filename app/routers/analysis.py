"""
Text analysis endpoints.

All of them take raw text in the body, reject empty text with 400 before any
analysis runs, and degrade to the local algorithms when the LLM is down.
"""
import dataclasses
import logging
from typing import Any, List, Optional, Sequence

from fastapi import APIRouter, Depends, HTTPException, status

from app.dependencies.analysis import get_analysis_service
from app.models.schemas import (
    ChatRequest,
    ChatResponse,
    ConceptMapRequest,
    ConceptMapResponse,
    DefineTermRequest,
    DefineTermResponse,
    KeywordsResponse,
    PassageSummaryRequest,
    PassageSummaryResponse,
    SentimentRequest,
    SentimentResponse,
    SummaryRequest,
    SummaryResponse,
    TextRequest,
)
from app.services.analysis_service import AnalysisService
from app.services.errors import EmptyTextError

logger = logging.getLogger(__name__)

router = APIRouter()


def keyword_words(keywords: Optional[Sequence[Any]]) -> List[str]:
    """Accept keywords as plain strings or as objects with a ``word`` key."""
    words: List[str] = []
    for item in keywords or []:
        word = item.get("word") if isinstance(item, dict) else item
        if isinstance(word, str) and word.strip():
            words.append(word.strip())
    return words


def _bad_request(exc: EmptyTextError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.post("/detect-keywords", response_model=KeywordsResponse)
async def detect_keywords(
    body: TextRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    """Quick pattern-based keywords without definitions."""
    try:
        keywords = service.detect_keywords(body.text)
    except EmptyTextError as exc:
        raise _bad_request(exc)
    return KeywordsResponse(
        keywords=[dataclasses.asdict(k) for k in keywords], count=len(keywords)
    )


@router.post("/analyze-keywords", response_model=KeywordsResponse)
async def analyze_keywords(
    body: TextRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    """Ranked keywords with definitions (semantic fingerprint pipeline)."""
    try:
        keywords = await service.analyze_semantic_fingerprint_keywords(body.text)
    except EmptyTextError as exc:
        raise _bad_request(exc)
    return KeywordsResponse(
        keywords=[dataclasses.asdict(k) for k in keywords], count=len(keywords)
    )


@router.post("/analyze-sentiment", response_model=SentimentResponse)
async def analyze_sentiment(
    body: SentimentRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    try:
        outcome = await service.analyze_sentiment(
            body.text, force_regenerate=body.force_regenerate
        )
    except EmptyTextError as exc:
        raise _bad_request(exc)
    return SentimentResponse(
        data=dataclasses.asdict(outcome.data),
        source=outcome.source,
        cached=outcome.cached,
    )


@router.post("/generate-document-summary", response_model=SummaryResponse)
async def generate_document_summary(
    body: SummaryRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    try:
        outcome = await service.summarize_document(
            body.text,
            keywords=keyword_words(body.keywords),
            force_regenerate=body.force_regenerate,
        )
    except EmptyTextError as exc:
        raise _bad_request(exc)
    return SummaryResponse(
        data=dataclasses.asdict(outcome.data),
        source=outcome.source,
        cached=outcome.cached,
    )


@router.post("/generate-concept-map", response_model=ConceptMapResponse)
async def generate_concept_map(
    body: ConceptMapRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    try:
        concept_map = await service.generate_concept_map(
            body.text, keyword_words(body.keywords)
        )
    except EmptyTextError as exc:
        raise _bad_request(exc)
    logger.info(
        "Concept map for %s: %d nodes, %d links (%s)",
        body.file_name or "document",
        len(concept_map.nodes),
        len(concept_map.links),
        concept_map.source,
    )
    return ConceptMapResponse(
        nodes=[dataclasses.asdict(n) for n in concept_map.nodes],
        links=[dataclasses.asdict(link) for link in concept_map.links],
        source=concept_map.source,
    )


# ---------------------------------------------------------------------------
# Reader helpers
# ---------------------------------------------------------------------------

@router.post("/define-term", response_model=DefineTermResponse)
async def define_term(
    body: DefineTermRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    """Definition of one selected term, read against its surrounding text."""
    try:
        definition = await service.define_term(
            body.term, body.context, general=body.search_online
        )
    except EmptyTextError as exc:
        raise _bad_request(exc)
    return DefineTermResponse(
        term=definition.term,
        summary=definition.definition,
        source=definition.source,
        fallback=definition.fallback,
    )


@router.post("/summarize-passage", response_model=PassageSummaryResponse)
async def summarize_passage(
    body: PassageSummaryRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    try:
        passage = await service.summarize_passage(body.text, body.context)
    except EmptyTextError as exc:
        raise _bad_request(exc)
    return PassageSummaryResponse(
        summary=passage.summary, source=passage.source, fallback=passage.fallback
    )


@router.post("/chat", response_model=ChatResponse)
async def chat(
    body: ChatRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    """Answer a question about the document text sent with it."""
    try:
        reply = await service.chat(body.message, body.document_context)
    except EmptyTextError as exc:
        raise _bad_request(exc)
    return ChatResponse(
        response=reply.response, source=reply.source, timestamp=reply.timestamp
    )
