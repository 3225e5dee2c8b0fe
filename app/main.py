"""
Main FastAPI application for the DocSense backend.
Handles CORS, request logging middleware, lifespan events, and router registration.
"""
import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.database import close_db, init_db
from app.dependencies.analysis import get_llm_service
from app.routers import analysis, annotations, documents, health, invites, user
from app.utils.helpers import utcnow

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Startup / shutdown helpers
# ---------------------------------------------------------------------------

async def _check_database() -> bool:
    """Initialise DB tables and verify the connection.  Returns True on success."""
    try:
        await init_db()
        logger.info("✓ Database connection OK")
        return True
    except Exception as exc:
        logger.error("✗ Database connection failed: %s", exc)
        raise


async def _check_ollama() -> bool:
    """
    Verify Ollama is reachable.  Never raises; analysis falls back to the
    local algorithms while the LLM is unavailable.
    """
    llm = get_llm_service()
    if not llm.is_enabled:
        logger.info("LLM disabled (LLM_ENABLED=false); using local analysis only")
        return False

    reachable = await llm.check_health()
    if reachable:
        logger.info("✓ Ollama reachable at %s (model %s)", llm.base_url, llm.model)
    else:
        logger.warning(
            "⚠ Ollama unreachable at %s; start it with: ollama serve && ollama pull %s",
            llm.base_url,
            llm.model,
        )
    return reachable


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown event handler."""
    logger.info("=" * 60)
    logger.info("  Starting DocSense backend …")
    logger.info("=" * 60)

    # 1 — Database (required; raises on failure)
    await _check_database()

    # 2 — Ollama (optional; logs warnings but continues)
    await _check_ollama()

    # 3 — Upload directory
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    logger.info("✓ Upload directory: %s", os.path.abspath(settings.UPLOAD_DIR))

    logger.info("=" * 60)
    logger.info("  DocSense backend ready on http://%s:%d", settings.HOST, settings.PORT)
    logger.info("  Swagger UI : http://%s:%d/docs", settings.HOST, settings.PORT)
    logger.info("  Health     : http://%s:%d/api/health", settings.HOST, settings.PORT)
    logger.info("=" * 60)

    yield  # ← server is running

    logger.info("Shutting down DocSense backend …")
    await close_db()
    logger.info("✓ Shutdown complete.")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="DocSense API",
    description=(
        "**DocSense**: document analysis and annotation backend.\n\n"
        "Upload PDFs, extract keywords with definitions, summarise documents, "
        "score their sentiment, draw concept maps, and share annotated "
        "documents through invites.\n\n"
        "Key endpoints:\n"
        "- `POST /api/documents/upload`: upload a PDF\n"
        "- `POST /api/documents/{id}/analyze`: keywords, summary and sentiment\n"
        "- `POST /api/analyze-keywords`: ranked keywords with definitions\n"
        "- `POST /api/analyze-sentiment`: sentiment of any text\n"
        "- `POST /api/generate-document-summary`: structured summary\n"
        "- `POST /api/generate-concept-map`: concept map of a document\n"
    ),
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Request / response logging middleware
# ---------------------------------------------------------------------------

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log every request with method, path, status code, and elapsed time.
    Attaches an ``X-Process-Time`` header (milliseconds) to every response.
    """
    t0 = time.monotonic()
    response = await call_next(request)
    elapsed_ms = round((time.monotonic() - t0) * 1000, 2)

    # Skip noisy health-check polling from the frontend
    if request.url.path not in ("/api/health", "/api/health/", "/"):
        logger.info(
            "%s %s → %d  (%.2f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )

    response.headers["X-Process-Time"] = f"{elapsed_ms}ms"
    return response


# ---------------------------------------------------------------------------
# Global exception handler
# ---------------------------------------------------------------------------

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return a structured JSON error for any unhandled exception."""
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "error": str(exc),
            "path": str(request.url.path),
            "timestamp": utcnow().isoformat(),
        },
    )


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(health.router,        prefix="/api/health",    tags=["Health"])
app.include_router(analysis.router,      prefix="/api",           tags=["Analysis"])
app.include_router(documents.router,     prefix="/api/documents", tags=["Documents"])
app.include_router(annotations.router,   prefix="/api/documents", tags=["Annotations"])
app.include_router(invites.router,       prefix="/api/documents", tags=["Invites"])
app.include_router(invites.token_router, prefix="/api/invites",   tags=["Invites"])
app.include_router(user.router,          prefix="/api/user",      tags=["User"])


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------

@app.get("/", tags=["Root"], include_in_schema=False)
async def root():
    """API root — returns basic service info."""
    return {
        "name": "DocSense API",
        "version": "0.1.0",
        "description": "Document Analysis Backend",
        "docs": "/docs",
        "health": "/api/health",
        "endpoints": {
            "documents": "/api/documents",
            "keywords": "/api/analyze-keywords",
            "sentiment": "/api/analyze-sentiment",
            "summary": "/api/generate-document-summary",
            "concept_map": "/api/generate-concept-map",
            "invites": "/api/invites",
            "user": "/api/user",
        },
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
        log_level="info",
    )
