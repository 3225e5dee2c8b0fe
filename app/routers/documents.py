"""
Document upload and management endpoints.

POST   /upload: store a PDF and extract its text.
POST   /: create a document from already-extracted text.
GET    /: list the caller's documents, newest first.
GET    /{id}: full document (updates last_accessed).
PATCH  /{id}: update keywords / summary / sentiment / tags / sharing.
DELETE /{id}: delete document, its annotations, invites and file.
POST   /{id}/analyze: run keywords, summary and sentiment and store them.
"""
from __future__ import annotations

import dataclasses
import logging
import os
import uuid
from pathlib import Path
from typing import List, Optional

import aiofiles
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from pydantic.alias_generators import to_camel
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.dependencies.analysis import get_analysis_service
from app.dependencies.auth import get_or_create_user, get_owned_document
from app.models.database_models import Annotation, Document, DocumentInvite, User
from app.models.schemas import (
    ChatResponse,
    DocumentAnalysisResponse,
    DocumentChatRequest,
    DocumentAnalyzeRequest,
    DocumentCreate,
    DocumentListItem,
    DocumentResponse,
    DocumentUpdate,
    DocumentUploadResponse,
)
from app.services.analysis_service import AnalysisService
from app.services.document_parser import DocumentParser
from app.services.errors import EmptyTextError
from app.utils.helpers import utcnow

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------

@router.post(
    "/upload",
    response_model=DocumentUploadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_document(
    file: UploadFile = File(...),
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
) -> DocumentUploadResponse:
    """
    Upload a PDF and extract its text.

    - Max file size: 50 MB (configurable via MAX_FILE_SIZE)
    - File is stored with a UUID filename to avoid collisions
    - Analysis is **not** run here; use POST /api/documents/{id}/analyze next
    """
    if not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Upload must include a filename.",
        )

    file_ext = Path(file.filename).suffix.lower()
    if file_ext not in settings.SUPPORTED_FILE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Unsupported file type '{file_ext}'. "
                f"Accepted: {', '.join(settings.SUPPORTED_FILE_TYPES)}"
            ),
        )

    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    stored_name = f"{uuid.uuid4().hex}{file_ext}"
    file_path = os.path.join(settings.UPLOAD_DIR, stored_name)
    file_size = 0

    try:
        # Stream to disk while enforcing the size limit
        too_large = False
        async with aiofiles.open(file_path, "wb") as out:
            while True:
                chunk = await file.read(1024 * 1024)   # 1 MB slices
                if not chunk:
                    break
                file_size += len(chunk)
                if file_size > settings.MAX_FILE_SIZE:
                    too_large = True
                    break
                await out.write(chunk)

        if too_large:
            _safe_remove(file_path)
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=(
                    f"File exceeds the {settings.MAX_FILE_SIZE // (1024 * 1024)} MB "
                    "size limit."
                ),
            )

        logger.info("Saved %r -> %s (%s bytes)", file.filename, file_path, f"{file_size:,}")

        parser = DocumentParser()
        try:
            parsed_doc = await parser.parse_document(file_path, file_ext)
        except RuntimeError as exc:
            _safe_remove(file_path)
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=str(exc),
            )

        if not parsed_doc.full_text.strip():
            _safe_remove(file_path)
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Document contains no extractable text.",
            )

        document = Document(
            user_id=user.id,
            file_name=stored_name,
            original_name=file.filename,
            file_path=file_path,
            file_size=file_size,
            file_type=file.content_type or "application/pdf",
            extracted_text=parsed_doc.full_text,
            metadata_json=parsed_doc.metadata,
            tags=[],
        )
        db.add(document)
        await db.commit()

        logger.info("Document %r stored as id=%d", file.filename, document.id)

        return DocumentUploadResponse(
            id=document.id,
            original_name=document.original_name,
            file_size=file_size,
            word_count=parsed_doc.metadata.get("word_count", 0),
            status="processed",
            message="Document uploaded and text extracted successfully.",
        )

    except HTTPException:
        raise
    except Exception as exc:
        logger.exception("Unexpected error processing %r", file.filename)
        _safe_remove(file_path)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error processing document: {exc}",
        )


# ---------------------------------------------------------------------------
# Create / list / get
# ---------------------------------------------------------------------------

@router.post("/", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def create_document(
    body: DocumentCreate,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
) -> DocumentResponse:
    """Store a document whose text was extracted elsewhere."""
    if not body.extracted_text.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Text is required",
        )
    document = Document(
        user_id=user.id,
        file_name=body.original_name,
        original_name=body.original_name,
        file_size=body.file_size,
        file_type=body.file_type,
        extracted_text=body.extracted_text,
        tags=body.tags,
        is_public=body.is_public,
    )
    db.add(document)
    await db.commit()
    logger.info("Created document id=%d for user %s", document.id, user.id)
    return DocumentResponse.model_validate(document)


@router.get("/", response_model=List[DocumentListItem])
async def list_documents(
    skip: int = 0,
    limit: int = 100,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
) -> List[DocumentListItem]:
    """
    List the caller's documents, newest first.

    Supports pagination via `skip` and `limit` query parameters.
    """
    docs_result = await db.execute(
        select(Document)
        .where(Document.user_id == user.id)
        .order_by(Document.upload_date.desc(), Document.id.desc())
        .offset(skip)
        .limit(limit)
    )
    return [DocumentListItem.model_validate(doc) for doc in docs_result.scalars().all()]


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document: Document = Depends(get_owned_document),
    db: AsyncSession = Depends(get_db),
) -> DocumentResponse:
    """Return a single document and record the access."""
    document.last_accessed = utcnow()
    await db.commit()
    return DocumentResponse.model_validate(document)


# ---------------------------------------------------------------------------
# Update / analyze
# ---------------------------------------------------------------------------

@router.patch("/{document_id}", response_model=DocumentResponse)
async def update_document(
    body: DocumentUpdate,
    document: Document = Depends(get_owned_document),
    db: AsyncSession = Depends(get_db),
) -> DocumentResponse:
    """Apply the provided fields; omitted fields are left unchanged."""
    changes = body.model_dump(exclude_unset=True)
    if "original_name" in changes:
        document.original_name = changes["original_name"]
    if "keywords" in changes:
        document.keywords_json = [
            k.model_dump(by_alias=True) for k in body.keywords or []
        ]
    if "summary" in changes:
        document.summary_json = body.summary
    if "sentiment" in changes:
        document.sentiment_json = body.sentiment
    if "tags" in changes:
        document.tags = body.tags or []
    if "is_public" in changes:
        document.is_public = bool(body.is_public)

    document.last_modified = utcnow()
    await db.commit()
    logger.info("Updated document id=%d fields=%s", document.id, sorted(changes))
    return DocumentResponse.model_validate(document)


@router.post("/{document_id}/analyze", response_model=DocumentAnalysisResponse)
async def analyze_document(
    body: Optional[DocumentAnalyzeRequest] = None,
    document: Document = Depends(get_owned_document),
    db: AsyncSession = Depends(get_db),
    service: AnalysisService = Depends(get_analysis_service),
) -> DocumentAnalysisResponse:
    """
    Run the full analysis on the stored text and persist the results.

    Keywords feed the summary; sentiment runs on the same text.
    """
    force = bool(body and body.force_regenerate)
    try:
        keywords = await service.analyze_semantic_fingerprint_keywords(document.extracted_text)
        summary = await service.summarize_document(
            document.extracted_text,
            keywords=[k.word for k in keywords],
            force_regenerate=force,
        )
        sentiment = await service.analyze_sentiment(
            document.extracted_text, force_regenerate=force
        )
    except EmptyTextError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    document.keywords_json = [_camel(dataclasses.asdict(k)) for k in keywords]
    document.summary_json = _camel(dataclasses.asdict(summary.data))
    document.sentiment_json = _camel(dataclasses.asdict(sentiment.data))
    document.last_modified = utcnow()
    await db.commit()

    logger.info(
        "Analyzed document id=%d: %d keywords, summary=%s, sentiment=%s",
        document.id,
        len(keywords),
        summary.source,
        sentiment.source,
    )
    return DocumentAnalysisResponse(
        document=DocumentResponse.model_validate(document),
        sources={"summary": summary.source, "sentiment": sentiment.source},
    )


@router.post("/{document_id}/chat", response_model=ChatResponse)
async def chat_with_document(
    body: DocumentChatRequest,
    document: Document = Depends(get_owned_document),
    service: AnalysisService = Depends(get_analysis_service),
) -> ChatResponse:
    """Answer a question about the stored document text."""
    try:
        reply = await service.chat(body.message, document.extracted_text)
    except EmptyTextError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return ChatResponse(
        response=reply.response, source=reply.source, timestamp=reply.timestamp
    )


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------

@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT, response_model=None)
async def delete_document(
    document: Document = Depends(get_owned_document),
    db: AsyncSession = Depends(get_db),
) -> None:
    """Delete a document, its annotations and invites, and its file on disk."""
    document_id, name = document.id, document.original_name
    paths = await delete_documents(db, [document_id])
    await db.commit()
    remove_files(paths)

    logger.info("Deleted document id=%d (%r)", document_id, name)


async def delete_documents(db: AsyncSession, document_ids: List[int]) -> List[str]:
    """
    Remove documents and everything that hangs off them.

    Returns the stored file paths; the caller removes them with
    ``remove_files`` once the transaction has committed.
    """
    if not document_ids:
        return []
    paths = (
        await db.execute(select(Document.file_path).where(Document.id.in_(document_ids)))
    ).scalars().all()
    await db.execute(delete(Annotation).where(Annotation.document_id.in_(document_ids)))
    await db.execute(
        delete(DocumentInvite).where(DocumentInvite.document_id.in_(document_ids))
    )
    await db.execute(delete(Document).where(Document.id.in_(document_ids)))
    return [path for path in paths if path]


def remove_files(paths: List[str]) -> None:
    for path in paths:
        _safe_remove(path)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _camel(value):
    """snake_case dict keys -> camelCase, recursively (stored JSON matches the API)."""
    if isinstance(value, dict):
        return {to_camel(k): _camel(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_camel(v) for v in value]
    return value


def _safe_remove(path: str) -> None:
    """Delete a file silently, logging warnings but never raising."""
    try:
        if path and os.path.exists(path):
            os.remove(path)
    except Exception as exc:
        logger.warning("Could not remove file %r: %s", path, exc)
