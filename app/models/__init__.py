"""Database and schema models for DocSense."""
from app.models.database_models import (
    User,
    Document,
    Annotation,
    DocumentInvite,
    AnnotationType,
)
from app.models.schemas import (
    KeywordSchema,
    SentimentSchema,
    DocumentSummarySchema,
    DocumentResponse,
    DocumentUploadResponse,
    AnnotationResponse,
    InviteResponse,
    HealthCheckResponse,
)

__all__ = [
    # Database models
    "User",
    "Document",
    "Annotation",
    "DocumentInvite",
    "AnnotationType",
    # Pydantic schemas
    "KeywordSchema",
    "SentimentSchema",
    "DocumentSummarySchema",
    "DocumentResponse",
    "DocumentUploadResponse",
    "AnnotationResponse",
    "InviteResponse",
    "HealthCheckResponse",
]
