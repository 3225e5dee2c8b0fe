"""
Annotation endpoints for document owners.

Mounted under /api/documents:

GET    /{id}/annotations: all annotations, oldest first.
POST   /{id}/annotations: new highlight or note.
PATCH  /{id}/annotations/{annotation_id}: change note or colour.
DELETE /{id}/annotations/{annotation_id}: delete it and its replies.
POST   /{id}/annotations/{annotation_id}/replies: reply to an annotation.
"""
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies.auth import get_or_create_user, get_owned_document
from app.models.database_models import Annotation, AnnotationType, Document, User
from app.models.schemas import (
    AnnotationCreate,
    AnnotationReplyCreate,
    AnnotationResponse,
    AnnotationUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def list_document_annotations(db: AsyncSession, document_id: int) -> List[Annotation]:
    result = await db.execute(
        select(Annotation)
        .where(Annotation.document_id == document_id)
        .order_by(Annotation.created_at.asc(), Annotation.id.asc())
    )
    return list(result.scalars().all())


async def add_annotation(
    db: AsyncSession, document_id: int, user_id: str, body: AnnotationCreate
) -> Annotation:
    annotation = Annotation(
        document_id=document_id,
        user_id=user_id,
        type=AnnotationType(body.type.value),
        selected_text=body.selected_text,
        note=body.note,
        color=body.color or "#ffeb3b",
        position_json=body.position,
    )
    db.add(annotation)
    await db.commit()
    logger.info(
        "Annotation id=%d (%s) added to document %d by %s",
        annotation.id,
        body.type.value,
        document_id,
        user_id,
    )
    return annotation


async def add_reply(
    db: AsyncSession,
    document_id: int,
    annotation_id: int,
    user_id: str,
    body: AnnotationReplyCreate,
) -> Annotation:
    """A reply is a note anchored to the same text as its parent."""
    parent = await _get_annotation(db, document_id, annotation_id)
    reply = Annotation(
        document_id=document_id,
        user_id=user_id,
        parent_id=parent.id,
        type=AnnotationType.NOTE,
        selected_text=parent.selected_text,
        note=body.note,
        color=parent.color,
        position_json=parent.position_json,
    )
    db.add(reply)
    await db.commit()
    return reply


async def _get_annotation(db: AsyncSession, document_id: int, annotation_id: int) -> Annotation:
    result = await db.execute(
        select(Annotation).where(
            Annotation.id == annotation_id,
            Annotation.document_id == document_id,
        )
    )
    annotation = result.scalar_one_or_none()
    if annotation is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Annotation {annotation_id} not found.",
        )
    return annotation


@router.get("/{document_id}/annotations", response_model=List[AnnotationResponse])
async def list_annotations(
    document: Document = Depends(get_owned_document),
    db: AsyncSession = Depends(get_db),
) -> List[AnnotationResponse]:
    annotations = await list_document_annotations(db, document.id)
    return [AnnotationResponse.model_validate(a) for a in annotations]


@router.post(
    "/{document_id}/annotations",
    response_model=AnnotationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_annotation(
    body: AnnotationCreate,
    document: Document = Depends(get_owned_document),
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
) -> AnnotationResponse:
    annotation = await add_annotation(db, document.id, user.id, body)
    return AnnotationResponse.model_validate(annotation)


@router.patch("/{document_id}/annotations/{annotation_id}", response_model=AnnotationResponse)
async def update_annotation(
    annotation_id: int,
    body: AnnotationUpdate,
    document: Document = Depends(get_owned_document),
    db: AsyncSession = Depends(get_db),
) -> AnnotationResponse:
    annotation = await _get_annotation(db, document.id, annotation_id)
    changes = body.model_dump(exclude_unset=True)
    if "note" in changes:
        annotation.note = body.note
    if changes.get("color"):
        annotation.color = body.color
    await db.commit()
    return AnnotationResponse.model_validate(annotation)


@router.delete(
    "/{document_id}/annotations/{annotation_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
)
async def delete_annotation(
    annotation_id: int,
    document: Document = Depends(get_owned_document),
    db: AsyncSession = Depends(get_db),
) -> None:
    """Delete an annotation together with its replies."""
    annotation = await _get_annotation(db, document.id, annotation_id)
    await db.execute(
        delete(Annotation).where(
            or_(Annotation.id == annotation.id, Annotation.parent_id == annotation.id)
        )
    )
    await db.commit()
    logger.info("Deleted annotation id=%d from document %d", annotation_id, document.id)


@router.post(
    "/{document_id}/annotations/{annotation_id}/replies",
    response_model=AnnotationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def reply_to_annotation(
    annotation_id: int,
    body: AnnotationReplyCreate,
    document: Document = Depends(get_owned_document),
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
) -> AnnotationResponse:
    reply = await add_reply(db, document.id, annotation_id, user.id, body)
    return AnnotationResponse.model_validate(reply)
