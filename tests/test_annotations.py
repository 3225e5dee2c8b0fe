"""Tests for the owner-side annotation endpoints."""
import pytest
from httpx import AsyncClient

from tests.conftest import AUTH_HEADERS, create_document

HIGHLIGHT = {
    "type": "highlight",
    "selectedText": "machine learning algorithm",
    "position": {"page": 1, "x": 72, "y": 200, "width": 180, "height": 14},
}


async def _annotate(client: AsyncClient, doc_id: int, **overrides) -> dict:
    resp = await client.post(
        f"/api/documents/{doc_id}/annotations",
        json={**HIGHLIGHT, **overrides},
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_create_annotation_defaults(client: AsyncClient):
    doc_id = await create_document(client)
    data = await _annotate(client, doc_id)

    assert data["documentId"] == doc_id
    assert data["userId"] == "test-user-1"
    assert data["type"] == "highlight"
    assert data["color"] == "#ffeb3b"
    assert data["position"]["page"] == 1
    assert data["parentId"] is None


@pytest.mark.asyncio
async def test_create_annotation_requires_selected_text(client: AsyncClient):
    doc_id = await create_document(client)
    resp = await client.post(
        f"/api/documents/{doc_id}/annotations",
        json={**HIGHLIGHT, "selectedText": ""},
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_list_annotations_oldest_first(client: AsyncClient):
    doc_id = await create_document(client)
    first = await _annotate(client, doc_id, note="first")
    second = await _annotate(client, doc_id, type="note", note="second")

    resp = await client.get(f"/api/documents/{doc_id}/annotations", headers=AUTH_HEADERS)
    assert resp.status_code == 200
    assert [a["id"] for a in resp.json()] == [first["id"], second["id"]]


@pytest.mark.asyncio
async def test_update_annotation_note_and_color(client: AsyncClient):
    doc_id = await create_document(client)
    annotation = await _annotate(client, doc_id)

    resp = await client.patch(
        f"/api/documents/{doc_id}/annotations/{annotation['id']}",
        json={"note": "check this", "color": "#90caf9"},
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 200
    assert resp.json()["note"] == "check this"
    assert resp.json()["color"] == "#90caf9"
    assert resp.json()["selectedText"] == HIGHLIGHT["selectedText"]


@pytest.mark.asyncio
async def test_reply_is_note_on_parent_text(client: AsyncClient):
    doc_id = await create_document(client)
    parent = await _annotate(client, doc_id, color="#a5d6a7")

    resp = await client.post(
        f"/api/documents/{doc_id}/annotations/{parent['id']}/replies",
        json={"note": "agreed"},
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 201
    reply = resp.json()
    assert reply["parentId"] == parent["id"]
    assert reply["type"] == "note"
    assert reply["note"] == "agreed"
    assert reply["selectedText"] == parent["selectedText"]
    assert reply["color"] == "#a5d6a7"


@pytest.mark.asyncio
async def test_delete_annotation_removes_replies(client: AsyncClient):
    doc_id = await create_document(client)
    parent = await _annotate(client, doc_id)
    other = await _annotate(client, doc_id, note="keep me")
    await client.post(
        f"/api/documents/{doc_id}/annotations/{parent['id']}/replies",
        json={"note": "reply"},
        headers=AUTH_HEADERS,
    )

    resp = await client.delete(
        f"/api/documents/{doc_id}/annotations/{parent['id']}", headers=AUTH_HEADERS
    )
    assert resp.status_code == 204

    remaining = await client.get(f"/api/documents/{doc_id}/annotations", headers=AUTH_HEADERS)
    assert [a["id"] for a in remaining.json()] == [other["id"]]


@pytest.mark.asyncio
async def test_unknown_annotation_returns_404(client: AsyncClient):
    doc_id = await create_document(client)

    resp = await client.patch(
        f"/api/documents/{doc_id}/annotations/99999", json={"note": "x"}, headers=AUTH_HEADERS
    )
    assert resp.status_code == 404

    resp = await client.delete(f"/api/documents/{doc_id}/annotations/99999", headers=AUTH_HEADERS)
    assert resp.status_code == 404
