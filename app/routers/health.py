"""
Health check endpoint.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
import logging

from app.database import get_db
from app.dependencies.analysis import get_llm_service
from app.models.schemas import HealthCheckResponse
from app.services.llm_client import OllamaLLMService
from app.utils.helpers import utcnow

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=HealthCheckResponse)
async def health_check(
    db: AsyncSession = Depends(get_db),
    llm: OllamaLLMService = Depends(get_llm_service),
):
    """
    Health check endpoint to verify system status.

    Returns:
        HealthCheckResponse with status of database and the LLM server
    """
    # Check database connection
    db_status = "ok"
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Database health check failed: %s", e)
        db_status = "error"

    # Check Ollama connection; a disabled LLM is not a degradation
    if not llm.is_enabled:
        llm_status = "disabled"
    elif await llm.check_health():
        llm_status = "ok"
    else:
        llm_status = "error"

    overall_status = "healthy" if db_status == "ok" and llm_status != "error" else "degraded"

    return HealthCheckResponse(
        status=overall_status,
        database=db_status,
        llm=llm_status,
        timestamp=utcnow(),
    )
