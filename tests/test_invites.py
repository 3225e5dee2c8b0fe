"""Tests for document invites and token-based access."""
from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from app.models.database_models import DocumentInvite
from app.utils.helpers import utcnow
from tests.conftest import AUTH_HEADERS, AUTH_HEADERS_USER2, create_document


async def _invite(client: AsyncClient, doc_id: int, email: str = "Reader@Example.com") -> dict:
    resp = await client.post(
        f"/api/documents/{doc_id}/invites",
        json={"email": email, "name": "Reader", "message": "Have a look"},
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# Owner side
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_invite(client: AsyncClient):
    doc_id = await create_document(client)
    invite = await _invite(client, doc_id)

    assert invite["inviteeEmail"] == "reader@example.com"
    assert invite["isUsed"] is False
    assert invite["inviteUrl"].endswith(f"/documents/invite/{invite['token']}")
    assert len(invite["token"]) >= 32


@pytest.mark.asyncio
async def test_invalid_email_rejected(client: AsyncClient):
    doc_id = await create_document(client)
    resp = await client.post(
        f"/api/documents/{doc_id}/invites", json={"email": "not-an-email"}, headers=AUTH_HEADERS
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_duplicate_active_invite_conflicts(client: AsyncClient):
    doc_id = await create_document(client)
    await _invite(client, doc_id)

    resp = await client.post(
        f"/api/documents/{doc_id}/invites",
        json={"email": "reader@example.com"},
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_list_invites_newest_first(client: AsyncClient):
    doc_id = await create_document(client)
    first = await _invite(client, doc_id, "a@example.com")
    second = await _invite(client, doc_id, "b@example.com")

    resp = await client.get(f"/api/documents/{doc_id}/invites", headers=AUTH_HEADERS)
    assert resp.status_code == 200
    assert [i["id"] for i in resp.json()] == [second["id"], first["id"]]


@pytest.mark.asyncio
async def test_other_user_cannot_invite(client: AsyncClient):
    doc_id = await create_document(client)
    resp = await client.post(
        f"/api/documents/{doc_id}/invites",
        json={"email": "x@example.com"},
        headers=AUTH_HEADERS_USER2,
    )
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Token side
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_open_shared_document(client: AsyncClient):
    doc_id = await create_document(client)
    invite = await _invite(client, doc_id)

    resp = await client.get(f"/api/invites/{invite['token']}")
    assert resp.status_code == 200
    data = resp.json()
    assert data["document"]["id"] == doc_id
    assert data["document"]["extractedText"]
    assert data["invite"]["isUsed"] is False

    # opening it does not consume the invite
    again = await client.get(f"/api/invites/{invite['token']}")
    assert again.status_code == 200


@pytest.mark.asyncio
async def test_unknown_token_returns_404(client: AsyncClient):
    resp = await client.get("/api/invites/no-such-token")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_expired_invite_returns_404(client: AsyncClient, db_session):
    doc_id = await create_document(client)
    invite = await _invite(client, doc_id)

    row = (
        await db_session.execute(select(DocumentInvite).where(DocumentInvite.id == invite["id"]))
    ).scalar_one()
    row.expires_at = utcnow() - timedelta(minutes=1)
    await db_session.commit()

    resp = await client.get(f"/api/invites/{invite['token']}")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_annotate_through_invite(client: AsyncClient):
    doc_id = await create_document(client)
    invite = await _invite(client, doc_id)
    token = invite["token"]

    resp = await client.post(
        f"/api/invites/{token}/annotations",
        json={"type": "highlight", "selectedText": "neural network", "position": {"page": 1}},
    )
    assert resp.status_code == 422  # identity header required

    resp = await client.post(
        f"/api/invites/{token}/annotations",
        json={"type": "highlight", "selectedText": "neural network", "position": {"page": 1}},
        headers=AUTH_HEADERS_USER2,
    )
    assert resp.status_code == 201
    annotation = resp.json()
    assert annotation["documentId"] == doc_id
    assert annotation["userId"] == "test-user-2"

    resp = await client.post(
        f"/api/invites/{token}/annotations/{annotation['id']}/replies",
        json={"note": "interesting"},
        headers=AUTH_HEADERS_USER2,
    )
    assert resp.status_code == 201
    assert resp.json()["parentId"] == annotation["id"]

    listed = await client.get(f"/api/invites/{token}/annotations")
    assert listed.status_code == 200
    assert len(listed.json()) == 2

    # the owner sees the invitee's annotations too
    owner_view = await client.get(f"/api/documents/{doc_id}/annotations", headers=AUTH_HEADERS)
    assert len(owner_view.json()) == 2
