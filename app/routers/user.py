"""
Account endpoints for the current user.

GET    /settings: profile plus settings merged over the defaults.
PUT    /settings: update name and any settings group.
GET    /export-data: everything the user owns as a JSON attachment.
DELETE /delete-account: remove the user and all owned data.
"""
from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies.auth import get_or_create_user
from app.models.database_models import Annotation, Document, DocumentInvite, User
from app.models.schemas import (
    AnnotationResponse,
    DocumentResponse,
    InviteResponse,
    UserProfile,
    UserSettingsResponse,
    UserSettingsUpdate,
)
from app.routers.documents import delete_documents, remove_files
from app.utils.helpers import utcnow

logger = logging.getLogger(__name__)

router = APIRouter()

SETTINGS_GROUPS = ("notifications", "privacy", "preferences", "security")

DEFAULT_SETTINGS: Dict[str, Dict[str, Any]] = {
    "notifications": {
        "email": True,
        "push": True,
        "documentUpdates": True,
        "projectInvites": True,
    },
    "privacy": {
        "profileVisibility": "private",
        "showEmail": False,
        "allowCollaboration": True,
    },
    "preferences": {
        "theme": "system",
        "language": "en",
        "timezone": "UTC",
    },
    "security": {
        "twoFactorEnabled": False,
        "sessionTimeout": 30,
    },
}


def merged_settings(stored: Optional[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Stored groups layered over DEFAULT_SETTINGS, key by key."""
    result = copy.deepcopy(DEFAULT_SETTINGS)
    for group, values in (stored or {}).items():
        if group in result and isinstance(values, dict):
            result[group].update(values)
    return result


def _settings_response(user: User) -> UserSettingsResponse:
    return UserSettingsResponse(
        user=UserProfile.model_validate(user),
        settings=merged_settings(user.settings_json),
    )


@router.get("/settings", response_model=UserSettingsResponse)
async def get_settings(user: User = Depends(get_or_create_user)) -> UserSettingsResponse:
    return _settings_response(user)


@router.put("/settings", response_model=UserSettingsResponse)
async def update_settings(
    body: UserSettingsUpdate,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
) -> UserSettingsResponse:
    changes = body.model_dump(exclude_unset=True)
    if changes.get("name"):
        user.name = changes["name"]

    stored = copy.deepcopy(user.settings_json or {})
    for group in SETTINGS_GROUPS:
        if changes.get(group) is not None:
            stored.setdefault(group, {}).update(changes[group])
    # reassign so the JSON column is flagged dirty
    user.settings_json = stored

    await db.commit()
    logger.info("Updated settings for user %s: %s", user.id, sorted(changes))
    return _settings_response(user)


@router.get("/export-data")
async def export_data(
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """Download profile, documents, annotations and invites as one JSON file."""
    documents = (
        await db.execute(
            select(Document).where(Document.user_id == user.id).order_by(Document.id)
        )
    ).scalars().all()
    annotations = (
        await db.execute(
            select(Annotation).where(Annotation.user_id == user.id).order_by(Annotation.id)
        )
    ).scalars().all()
    invites = (
        await db.execute(
            select(DocumentInvite)
            .where(DocumentInvite.invited_by == user.id)
            .order_by(DocumentInvite.id)
        )
    ).scalars().all()

    payload = {
        "user": UserProfile.model_validate(user).model_dump(by_alias=True),
        "settings": merged_settings(user.settings_json),
        "documents": [
            DocumentResponse.model_validate(d).model_dump(by_alias=True) for d in documents
        ],
        "annotations": [
            AnnotationResponse.model_validate(a).model_dump(by_alias=True) for a in annotations
        ],
        "invites": [
            InviteResponse.model_validate(i).model_dump(by_alias=True) for i in invites
        ],
        "exportedAt": utcnow(),
    }
    filename = f"docsense-export-{utcnow():%Y-%m-%d}.json"
    logger.info(
        "Exported data for user %s: %d documents, %d annotations, %d invites",
        user.id,
        len(documents),
        len(annotations),
        len(invites),
    )
    return JSONResponse(
        content=jsonable_encoder(payload),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("/delete-account")
async def delete_account(
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, str]:
    """Delete the user's documents (with their annotations and invites) and the user."""
    user_id = user.id
    document_ids = list(
        (await db.execute(select(Document.id).where(Document.user_id == user_id))).scalars()
    )
    paths = await delete_documents(db, document_ids)
    await db.execute(delete(Annotation).where(Annotation.user_id == user_id))
    await db.execute(delete(DocumentInvite).where(DocumentInvite.invited_by == user_id))
    await db.execute(delete(User).where(User.id == user_id))
    await db.commit()
    remove_files(paths)

    logger.info("Deleted account %s (%d documents)", user_id, len(document_ids))
    return {"message": "Account deleted successfully"}
