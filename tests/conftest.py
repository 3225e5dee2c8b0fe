"""
Shared fixtures for DocSense backend tests.

The API tests run against an in-memory SQLite database (aiosqlite) so no
PostgreSQL server is needed. Each test function gets a fresh engine with the
tables created from the ORM metadata, and a fresh AnalysisService with the
LLM switched off so every analysis takes the local path.
"""
from __future__ import annotations

import os
import tempfile
from typing import AsyncGenerator

# Settings are read at import time, so the environment is set *before* any
# app module is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["LLM_ENABLED"] = "false"
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="docsense-test-uploads-"))

import httpx  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Base, get_db  # noqa: E402
from app.dependencies.analysis import get_analysis_service  # noqa: E402
from app.main import app  # noqa: E402
from app.services.analysis_service import AnalysisService  # noqa: E402
from app.services.llm_client import OllamaLLMService  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite://"


# ---------------------------------------------------------------------------
# Per-test fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a DB session on a private in-memory database.
    The database disappears with the engine at the end of the test.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    await engine.dispose()


@pytest_asyncio.fixture
async def analysis_service() -> AnalysisService:
    """Local-only analysis service with its own (empty) caches."""
    return AnalysisService(llm=None)


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession, analysis_service: AnalysisService
) -> AsyncGenerator[AsyncClient, None]:
    """
    httpx AsyncClient wired to the FastAPI app with the DB and analysis
    dependencies overridden for the test.
    """

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_analysis_service] = lambda: analysis_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

AUTH_HEADERS = {
    "X-User-Id": "test-user-1",
    "X-User-Email": "test1@example.com",
    "X-User-Name": "Test User 1",
}

AUTH_HEADERS_USER2 = {
    "X-User-Id": "test-user-2",
    "X-User-Email": "test2@example.com",
    "X-User-Name": "Test User 2",
}

SAMPLE_TEXT = """Abstract
This study presents a machine learning algorithm for document classification.
The algorithm improves classification accuracy on a benchmark dataset.

Introduction
Document classification is a core problem in natural language processing.
Machine learning methods such as the support vector machine (SVM) are common.

Methodology
We trained a neural network on the dataset and measured accuracy and precision.
The algorithm refers to a sequence of training steps applied to each document.

Results
The neural network reached high accuracy. The algorithm was effective and promising.

Conclusion
Machine learning remains a useful approach to document classification.
"""


async def create_document(
    client: AsyncClient, headers=None, text: str = SAMPLE_TEXT, name: str = "paper.pdf"
) -> int:
    """Create a document through the JSON endpoint and return its id."""
    resp = await client.post(
        "/api/documents/",
        json={"originalName": name, "extractedText": text, "fileSize": len(text)},
        headers=headers or AUTH_HEADERS,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


class FakeClock:
    """Manually advanced clock for the analysis caches."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def mock_llm(responses):
    """
    OllamaLLMService backed by httpx.MockTransport.

    *responses* is a list of ``(status, body)`` pairs served in order by
    /api/generate; a 200 body becomes the ``response`` field of the JSON reply.
    """
    answers = iter(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        status, body = next(answers)
        if status != 200:
            return httpx.Response(status, text=body)
        return httpx.Response(200, json={"response": body})

    return OllamaLLMService(
        base_url="http://ollama.test",
        model="test-model",
        enabled=True,
        transport=httpx.MockTransport(handler),
    )
