"""
Document invites.

Owner side (mounted under /api/documents):
    POST /{id}/invites: invite someone by e-mail.
    GET  /{id}/invites: invites for the document, newest first.

Token side (mounted under /api/invites):
    GET  /{token}: the shared document.
    GET  /{token}/annotations: its annotations.
    POST /{token}/annotations: annotate it (identity header required).
    POST /{token}/annotations/{annotation_id}/replies: reply to an annotation.

E-mail delivery is not part of this service; the invite URL is logged and
returned to the owner.
"""
from __future__ import annotations

import logging
import secrets
from datetime import timedelta
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.dependencies.auth import get_or_create_user, get_owned_document
from app.models.database_models import Document, DocumentInvite, User
from app.models.schemas import (
    AnnotationCreate,
    AnnotationReplyCreate,
    AnnotationResponse,
    DocumentResponse,
    InviteCreate,
    InviteResponse,
    SharedDocumentResponse,
)
from app.routers.annotations import add_annotation, add_reply, list_document_annotations
from app.utils.helpers import is_valid_email, utcnow

logger = logging.getLogger(__name__)

router = APIRouter()
token_router = APIRouter()


def invite_url(token: str) -> str:
    return f"{settings.APP_BASE_URL.rstrip('/')}/documents/invite/{token}"


def _invite_response(invite: DocumentInvite) -> InviteResponse:
    response = InviteResponse.model_validate(invite)
    response.invite_url = invite_url(invite.token)
    return response


# ---------------------------------------------------------------------------
# Owner side
# ---------------------------------------------------------------------------

@router.post(
    "/{document_id}/invites",
    response_model=InviteResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_invite(
    body: InviteCreate,
    document: Document = Depends(get_owned_document),
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
) -> InviteResponse:
    email = body.email.strip().lower()
    if not is_valid_email(email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid email address.",
        )

    now = utcnow()
    existing = await db.execute(
        select(DocumentInvite).where(
            DocumentInvite.document_id == document.id,
            DocumentInvite.invitee_email == email,
            DocumentInvite.is_used.is_(False),
            DocumentInvite.expires_at > now,
        )
    )
    if existing.scalars().first() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An active invite already exists for this email.",
        )

    invite = DocumentInvite(
        document_id=document.id,
        invited_by=user.id,
        invitee_email=email,
        invitee_name=body.name,
        message=body.message,
        token=secrets.token_urlsafe(32),
        expires_at=now + timedelta(days=settings.INVITE_EXPIRY_DAYS),
        is_used=False,
    )
    db.add(invite)
    await db.commit()

    logger.info(
        "Invite for document %d sent to %s: %s",
        document.id,
        email,
        invite_url(invite.token),
    )
    return _invite_response(invite)


@router.get("/{document_id}/invites", response_model=List[InviteResponse])
async def list_invites(
    document: Document = Depends(get_owned_document),
    db: AsyncSession = Depends(get_db),
) -> List[InviteResponse]:
    result = await db.execute(
        select(DocumentInvite)
        .where(DocumentInvite.document_id == document.id)
        .order_by(DocumentInvite.created_at.desc(), DocumentInvite.id.desc())
    )
    return [_invite_response(invite) for invite in result.scalars().all()]


# ---------------------------------------------------------------------------
# Token side
# ---------------------------------------------------------------------------

async def get_invite_by_token(
    token: str,
    db: AsyncSession = Depends(get_db),
) -> DocumentInvite:
    """Resolve an unused, unexpired invite token or raise 404."""
    result = await db.execute(select(DocumentInvite).where(DocumentInvite.token == token))
    invite = result.scalar_one_or_none()
    if invite is None or invite.is_used or invite.expires_at <= utcnow():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invite not found or expired.",
        )
    return invite


async def _shared_document(db: AsyncSession, invite: DocumentInvite) -> Document:
    result = await db.execute(select(Document).where(Document.id == invite.document_id))
    document = result.scalar_one_or_none()
    if document is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found.",
        )
    return document


@token_router.get("/{token}", response_model=SharedDocumentResponse)
async def get_shared_document(
    invite: DocumentInvite = Depends(get_invite_by_token),
    db: AsyncSession = Depends(get_db),
) -> SharedDocumentResponse:
    """Open the shared document and record the access."""
    document = await _shared_document(db, invite)
    document.last_accessed = utcnow()
    await db.commit()
    logger.info("Document %d opened through invite id=%d", document.id, invite.id)
    return SharedDocumentResponse(
        document=DocumentResponse.model_validate(document),
        invite=_invite_response(invite),
    )


@token_router.get("/{token}/annotations", response_model=List[AnnotationResponse])
async def get_shared_annotations(
    invite: DocumentInvite = Depends(get_invite_by_token),
    db: AsyncSession = Depends(get_db),
) -> List[AnnotationResponse]:
    annotations = await list_document_annotations(db, invite.document_id)
    return [AnnotationResponse.model_validate(a) for a in annotations]


@token_router.post(
    "/{token}/annotations",
    response_model=AnnotationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_shared_annotation(
    body: AnnotationCreate,
    invite: DocumentInvite = Depends(get_invite_by_token),
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
) -> AnnotationResponse:
    annotation = await add_annotation(db, invite.document_id, user.id, body)
    return AnnotationResponse.model_validate(annotation)


@token_router.post(
    "/{token}/annotations/{annotation_id}/replies",
    response_model=AnnotationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def reply_to_shared_annotation(
    annotation_id: int,
    body: AnnotationReplyCreate,
    invite: DocumentInvite = Depends(get_invite_by_token),
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
) -> AnnotationResponse:
    reply = await add_reply(db, invite.document_id, annotation_id, user.id, body)
    return AnnotationResponse.model_validate(reply)
