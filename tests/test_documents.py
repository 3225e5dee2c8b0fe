"""Tests for document upload, CRUD and analysis."""
import io
import os

import fitz
import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from app.config import settings
from app.models.database_models import Annotation, Document, DocumentInvite
from tests.conftest import AUTH_HEADERS, AUTH_HEADERS_USER2, create_document


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _create_dummy_pdf() -> bytes:
    """Return minimal valid PDF bytes (1 blank page)."""
    return (
        b"%PDF-1.4\n"
        b"1 0 obj<</Type/Catalog/Pages 2 0 R>>endobj\n"
        b"2 0 obj<</Type/Pages/Kids[3 0 R]/Count 1>>endobj\n"
        b"3 0 obj<</Type/Page/MediaBox[0 0 612 792]/Parent 2 0 R>>endobj\n"
        b"xref\n0 4\n"
        b"0000000000 65535 f \n"
        b"0000000009 00000 n \n"
        b"0000000058 00000 n \n"
        b"0000000115 00000 n \n"
        b"trailer<</Size 4/Root 1 0 R>>\n"
        b"startxref\n190\n%%EOF\n"
    )


def _create_text_pdf(text: str = "Graph algorithms find shortest paths.") -> bytes:
    """One-page PDF with a body line well below the header band."""
    doc = fitz.open()
    page = doc.new_page(width=612, height=792)
    page.insert_text((72, 200), text, fontsize=11)
    data = doc.tobytes()
    doc.close()
    return data


async def _upload(client: AsyncClient, data: bytes, name: str = "paper.pdf", headers=None):
    return await client.post(
        "/api/documents/upload",
        headers=headers or AUTH_HEADERS,
        files={"file": (name, io.BytesIO(data), "application/pdf")},
    )


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_upload_requires_auth_header(client: AsyncClient):
    resp = await client.post(
        "/api/documents/upload",
        files={"file": ("paper.pdf", io.BytesIO(_create_text_pdf()), "application/pdf")},
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_upload_unsupported_type(client: AsyncClient):
    """Uploading a .txt file should fail with 400."""
    resp = await client.post(
        "/api/documents/upload",
        headers=AUTH_HEADERS,
        files={"file": ("notes.txt", b"hello world", "text/plain")},
    )
    assert resp.status_code == 400
    assert "Unsupported file type" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_upload_empty_pdf(client: AsyncClient):
    """A minimal PDF with no text should return 422."""
    resp = await _upload(client, _create_dummy_pdf(), "empty.pdf")
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_upload_too_large(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(settings, "MAX_FILE_SIZE", 100)
    resp = await _upload(client, _create_text_pdf())
    assert resp.status_code == 413


@pytest.mark.asyncio
async def test_upload_extracts_text(client: AsyncClient):
    resp = await _upload(client, _create_text_pdf())
    assert resp.status_code == 201
    data = resp.json()
    assert data["originalName"] == "paper.pdf"
    assert data["wordCount"] == 5
    assert data["status"] == "processed"

    resp = await client.get(f"/api/documents/{data['id']}", headers=AUTH_HEADERS)
    assert resp.status_code == 200
    doc = resp.json()
    assert doc["extractedText"] == "Graph algorithms find shortest paths."
    assert doc["metadata"]["page_count"] == 1
    assert doc["fileSize"] == data["fileSize"]


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_documents_empty(client: AsyncClient):
    resp = await client.get("/api/documents/", headers=AUTH_HEADERS)
    assert resp.status_code == 200
    assert resp.json() == []


@pytest.mark.asyncio
async def test_create_and_list_newest_first(client: AsyncClient):
    first = await create_document(client, name="first.pdf")
    second = await create_document(client, name="second.pdf")

    resp = await client.get("/api/documents/", headers=AUTH_HEADERS)
    assert resp.status_code == 200
    ids = [d["id"] for d in resp.json()]
    assert ids == [second, first]
    assert "extractedText" not in resp.json()[0]


@pytest.mark.asyncio
async def test_create_rejects_blank_text(client: AsyncClient):
    resp = await client.post(
        "/api/documents/",
        json={"originalName": "blank.pdf", "extractedText": "   "},
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Text is required"


@pytest.mark.asyncio
async def test_documents_are_private(client: AsyncClient):
    doc_id = await create_document(client)

    resp = await client.get(f"/api/documents/{doc_id}", headers=AUTH_HEADERS_USER2)
    assert resp.status_code == 404

    resp = await client.get("/api/documents/", headers=AUTH_HEADERS_USER2)
    assert resp.json() == []


@pytest.mark.asyncio
async def test_update_document(client: AsyncClient):
    doc_id = await create_document(client)

    resp = await client.patch(
        f"/api/documents/{doc_id}",
        json={
            "tags": ["graphs"],
            "isPublic": True,
            "keywords": [{"word": "graph", "definition": "A set of nodes."}],
        },
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["tags"] == ["graphs"]
    assert data["isPublic"] is True
    assert data["keywords"][0]["word"] == "graph"
    assert data["keywords"][0]["isFromExternalSource"] is False
    assert data["originalName"] == "paper.pdf"


@pytest.mark.asyncio
async def test_delete_nonexistent_document(client: AsyncClient):
    """Deleting a document that doesn't exist should return 404."""
    resp = await client.delete("/api/documents/999999", headers=AUTH_HEADERS)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_removes_annotations_and_invites(client: AsyncClient, db_session):
    doc_id = await create_document(client)
    resp = await client.post(
        f"/api/documents/{doc_id}/annotations",
        json={"type": "highlight", "selectedText": "algorithm", "position": {"page": 1}},
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 201
    resp = await client.post(
        f"/api/documents/{doc_id}/invites",
        json={"email": "friend@example.com"},
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 201

    resp = await client.delete(f"/api/documents/{doc_id}", headers=AUTH_HEADERS)
    assert resp.status_code == 204

    resp = await client.get(f"/api/documents/{doc_id}", headers=AUTH_HEADERS)
    assert resp.status_code == 404
    for model in (Document, Annotation, DocumentInvite):
        count = (await db_session.execute(select(func.count()).select_from(model))).scalar_one()
        assert count == 0


async def _stored_path(db_session, doc_id: int) -> str:
    return (
        await db_session.execute(select(Document.file_path).where(Document.id == doc_id))
    ).scalar_one()


@pytest.mark.asyncio
async def test_delete_removes_uploaded_file(client: AsyncClient, db_session):
    doc_id = (await _upload(client, _create_text_pdf())).json()["id"]
    path = await _stored_path(db_session, doc_id)
    assert os.path.exists(path)

    resp = await client.delete(f"/api/documents/{doc_id}", headers=AUTH_HEADERS)
    assert resp.status_code == 204
    assert not os.path.exists(path)


@pytest.mark.asyncio
async def test_failed_delete_keeps_file(client: AsyncClient, db_session, monkeypatch):
    doc_id = (await _upload(client, _create_text_pdf())).json()["id"]
    path = await _stored_path(db_session, doc_id)

    async def _failing_commit():
        raise RuntimeError("commit failed")

    monkeypatch.setattr(db_session, "commit", _failing_commit)
    with pytest.raises(RuntimeError):
        await client.delete(f"/api/documents/{doc_id}", headers=AUTH_HEADERS)
    monkeypatch.undo()
    await db_session.rollback()

    assert os.path.exists(path)
    resp = await client.get(f"/api/documents/{doc_id}", headers=AUTH_HEADERS)
    assert resp.status_code == 200


# ---------------------------------------------------------------------------
# Analyze
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_analyze_document_persists_results(client: AsyncClient):
    doc_id = await create_document(client)

    resp = await client.post(f"/api/documents/{doc_id}/analyze", headers=AUTH_HEADERS)
    assert resp.status_code == 200
    data = resp.json()
    assert data["sources"] == {"summary": "local", "sentiment": "local"}

    document = data["document"]
    assert 0 < len(document["keywords"]) <= 20
    assert {"word", "definition", "context", "isFromExternalSource"} <= set(document["keywords"][0])
    assert document["summary"]["documentType"] == "Research Paper"
    assert document["summary"]["complexity"] == "beginner"
    assert document["sentiment"]["overallSentiment"] in {"positive", "negative", "neutral", "mixed"}

    # stored, not just returned
    resp = await client.get(f"/api/documents/{doc_id}", headers=AUTH_HEADERS)
    assert resp.json()["summary"] == document["summary"]


@pytest.mark.asyncio
async def test_reanalyze_uses_cache_unless_forced(client: AsyncClient):
    doc_id = await create_document(client)
    await client.post(f"/api/documents/{doc_id}/analyze", headers=AUTH_HEADERS)

    resp = await client.post(f"/api/documents/{doc_id}/analyze", headers=AUTH_HEADERS)
    assert resp.json()["sources"] == {"summary": "cache", "sentiment": "cache"}

    resp = await client.post(
        f"/api/documents/{doc_id}/analyze",
        json={"forceRegenerate": True},
        headers=AUTH_HEADERS,
    )
    assert resp.json()["sources"] == {"summary": "local", "sentiment": "local"}


@pytest.mark.asyncio
async def test_chat_uses_stored_document_text(client: AsyncClient):
    doc_id = await create_document(client)

    resp = await client.post(
        f"/api/documents/{doc_id}/chat",
        json={"message": "What are the key points?"},
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["source"] == "local"
    assert "- abstract\n- study\n- presents" in data["response"]


@pytest.mark.asyncio
async def test_chat_requires_message(client: AsyncClient):
    doc_id = await create_document(client)

    resp = await client.post(
        f"/api/documents/{doc_id}/chat", json={"message": " "}, headers=AUTH_HEADERS
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_chat_on_other_users_document_not_found(client: AsyncClient):
    doc_id = await create_document(client)

    resp = await client.post(
        f"/api/documents/{doc_id}/chat", json={"message": "Summarize"}, headers=AUTH_HEADERS_USER2
    )
    assert resp.status_code == 404
