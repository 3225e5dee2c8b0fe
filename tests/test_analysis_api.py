"""Tests for the text analysis endpoints."""
import pytest
from httpx import AsyncClient

from tests.conftest import SAMPLE_TEXT


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path",
    [
        "/api/detect-keywords",
        "/api/analyze-keywords",
        "/api/analyze-sentiment",
        "/api/generate-document-summary",
        "/api/generate-concept-map",
    ],
)
async def test_empty_text_rejected(client: AsyncClient, path):
    resp = await client.post(path, json={"text": "  ", "keywords": ["a"]})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Text is required"


@pytest.mark.asyncio
async def test_detect_keywords(client: AsyncClient):
    resp = await client.post(
        "/api/detect-keywords",
        json={"text": "The ALGORITHM uses ALGORITHM for classification. "
                      "ALGORITHM improves ALGORITHM accuracy."},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["count"] == len(data["keywords"])
    words = [k["word"].lower() for k in data["keywords"]]
    assert words.count("algorithm") == 1
    assert data["keywords"][0]["score"] == 2.0
    assert data["keywords"][0]["definition"] == ""


@pytest.mark.asyncio
async def test_analyze_keywords(client: AsyncClient):
    resp = await client.post("/api/analyze-keywords", json={"text": SAMPLE_TEXT})
    assert resp.status_code == 200
    keywords = resp.json()["keywords"]
    assert 0 < len(keywords) <= 20
    assert all(k["definition"] for k in keywords)
    assert all(k["isFromExternalSource"] is False for k in keywords)


@pytest.mark.asyncio
async def test_analyze_keywords_references_only(client: AsyncClient):
    resp = await client.post("/api/analyze-keywords", json={"text": "References: [1] Smith et al."})
    assert resp.status_code == 200
    assert resp.json() == {"keywords": [], "count": 0}


@pytest.mark.asyncio
async def test_sentiment_cached_on_second_call(client: AsyncClient):
    body = {"text": "excellent outstanding breakthrough successful"}

    first = await client.post("/api/analyze-sentiment", json=body)
    assert first.status_code == 200
    assert first.json()["success"] is True
    assert first.json()["source"] == "local"
    assert first.json()["data"]["overallSentiment"] == "positive"
    assert first.json()["data"]["sentimentScore"] > 0.1

    second = await client.post("/api/analyze-sentiment", json=body)
    assert second.json()["cached"] is True
    assert second.json()["data"] == first.json()["data"]

    forced = await client.post("/api/analyze-sentiment", json={**body, "forceRegenerate": True})
    assert forced.json()["cached"] is False


@pytest.mark.asyncio
async def test_summary_accepts_keyword_objects(client: AsyncClient):
    resp = await client.post(
        "/api/generate-document-summary",
        json={"text": SAMPLE_TEXT, "keywords": [{"word": "algorithm"}, "dataset", {"x": 1}]},
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["importantConcepts"] == ["algorithm", "dataset"]
    assert data["readingTime"] == "1 minute"


@pytest.mark.asyncio
async def test_concept_map_requires_keywords(client: AsyncClient):
    resp = await client.post("/api/generate-concept-map", json={"text": SAMPLE_TEXT, "keywords": []})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Text and keywords are required"


@pytest.mark.asyncio
async def test_concept_map_fallback(client: AsyncClient):
    resp = await client.post(
        "/api/generate-concept-map",
        json={"text": SAMPLE_TEXT, "keywords": ["algorithm", "dataset", "accuracy"], "fileName": "paper.pdf"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["source"] == "local"
    assert [n["label"] for n in data["nodes"]] == ["algorithm", "dataset", "accuracy"]
    assert len(data["links"]) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path,body,detail",
    [
        ("/api/define-term", {"term": " ", "context": SAMPLE_TEXT}, "Term is required"),
        ("/api/summarize-passage", {"text": "", "context": SAMPLE_TEXT}, "Text is required"),
        ("/api/chat", {"message": "Summarize"}, "Message and document context are required"),
        ("/api/chat", {"documentContext": SAMPLE_TEXT}, "Message and document context are required"),
    ],
)
async def test_reader_helpers_reject_missing_input(client: AsyncClient, path, body, detail):
    resp = await client.post(path, json=body)
    assert resp.status_code == 400
    assert resp.json()["detail"] == detail


@pytest.mark.asyncio
async def test_define_term_local_fallback(client: AsyncClient):
    resp = await client.post(
        "/api/define-term", json={"term": "algorithm", "context": SAMPLE_TEXT, "searchOnline": False}
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["term"] == "algorithm"
    assert data["summary"].startswith("**algorithm** is a step-by-step procedure")
    assert data["source"] == "local"
    assert data["fallback"] is True


@pytest.mark.asyncio
async def test_summarize_passage_local_fallback(client: AsyncClient):
    resp = await client.post(
        "/api/summarize-passage",
        json={"text": "The model is a function.", "context": "Methodology"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["fallback"] is True
    assert data["summary"] == (
        "This text provides a definition or explanation of a concept. "
        "It includes technical terminology. "
        "This is a brief explanation. "
        "The content appears to be from the methodology section of a document. "
        "This information helps clarify concepts and terminology."
    )


@pytest.mark.asyncio
async def test_chat_local_reply(client: AsyncClient):
    resp = await client.post(
        "/api/chat",
        json={"message": "What does it say about accuracy?", "documentContext": SAMPLE_TEXT},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["source"] == "local"
    assert data["response"].startswith("Regarding accuracy in the document:")
    assert data["timestamp"]
