"""
Analysis service dependency.

One AnalysisService (and therefore one pair of result caches) per process.
Tests override ``get_analysis_service`` through ``app.dependency_overrides``.
"""
from functools import lru_cache

from app.services.analysis_service import AnalysisService
from app.services.llm_client import OllamaLLMService


@lru_cache(maxsize=1)
def get_llm_service() -> OllamaLLMService:
    return OllamaLLMService()


@lru_cache(maxsize=1)
def get_analysis_service() -> AnalysisService:
    return AnalysisService(llm=get_llm_service())
