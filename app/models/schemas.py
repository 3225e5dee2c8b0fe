"""
Pydantic schemas for request/response validation.

Payloads travel in camelCase (``isFromExternalSource``, ``forceRegenerate``);
requests also accept the snake_case field names.
"""
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum


class CamelModel(BaseModel):
    """Base schema serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrmCamelModel(CamelModel):
    """camelCase schema that can be built from ORM objects."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


# Enums (matching database enums)
class AnnotationTypeSchema(str, Enum):
    """Annotation types for API requests and responses."""

    HIGHLIGHT = "highlight"
    NOTE = "note"


class SentimentLabel(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    MIXED = "mixed"


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

class TextRequest(CamelModel):
    """Body of the keyword endpoints."""

    text: str = ""


class SentimentRequest(CamelModel):
    text: str = ""
    force_regenerate: bool = False


class SummaryRequest(CamelModel):
    text: str = ""
    title: Optional[str] = None
    keywords: Optional[List[Any]] = None
    force_regenerate: bool = False


class ConceptMapRequest(CamelModel):
    text: str = ""
    keywords: List[Any] = Field(default_factory=list)
    file_name: Optional[str] = None


class KeywordSchema(OrmCamelModel):
    """A keyword with its definition and surrounding context."""

    word: str
    definition: str = ""
    context: str = ""
    is_from_external_source: bool = False
    score: float = 0.0


class KeywordsResponse(CamelModel):
    keywords: List[KeywordSchema]
    count: int


class SectionSentimentSchema(OrmCamelModel):
    section: str
    sentiment: str
    score: float


class SentimentSchema(OrmCamelModel):
    overall_sentiment: SentimentLabel
    sentiment_score: float = Field(..., ge=-1.0, le=1.0)
    emotional_tone: str
    confidence: float = Field(..., ge=0.0, le=100.0)
    key_indicators: List[str] = []
    section_breakdown: List[SectionSentimentSchema] = []
    audience_perception: str = ""
    summary: str = ""


class DocumentSummarySchema(OrmCamelModel):
    main_topic: str
    key_findings: List[str] = []
    methodology: str = ""
    important_concepts: List[str] = []
    target_audience: str = ""
    practical_applications: List[str] = []
    document_type: str = "Document"
    summary: str = ""
    reading_time: str = ""
    complexity: str = "intermediate"


class SentimentResponse(CamelModel):
    success: bool = True
    data: SentimentSchema
    source: str
    cached: bool = False


class SummaryResponse(CamelModel):
    success: bool = True
    data: DocumentSummarySchema
    source: str
    cached: bool = False


class ConceptMapNodeSchema(OrmCamelModel):
    id: str
    label: str
    type: str
    x: float
    y: float
    importance: float
    description: str = ""


class ConceptMapLinkSchema(OrmCamelModel):
    source: str
    target: str
    label: str
    strength: float


class ConceptMapResponse(CamelModel):
    success: bool = True
    nodes: List[ConceptMapNodeSchema]
    links: List[ConceptMapLinkSchema]
    source: str


class DefineTermRequest(CamelModel):
    term: str = ""
    context: str = ""
    search_online: bool = False


class DefineTermResponse(CamelModel):
    success: bool = True
    term: str
    summary: str
    source: str
    fallback: bool


class PassageSummaryRequest(CamelModel):
    text: str = ""
    context: str = ""


class PassageSummaryResponse(CamelModel):
    success: bool = True
    summary: str
    source: str
    fallback: bool


class ChatRequest(CamelModel):
    message: str = ""
    document_context: str = ""


class DocumentChatRequest(CamelModel):
    message: str = ""


class ChatResponse(CamelModel):
    success: bool = True
    response: str
    source: str
    timestamp: datetime


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

class DocumentCreate(CamelModel):
    """JSON document creation (text already extracted by the client)."""

    original_name: str = Field(..., min_length=1, max_length=255)
    extracted_text: str = Field(..., min_length=1)
    file_type: str = "application/pdf"
    file_size: int = Field(0, ge=0)
    tags: List[str] = []
    is_public: bool = False


class DocumentUpdate(CamelModel):
    """Partial document update; only provided fields change."""

    original_name: Optional[str] = Field(None, min_length=1, max_length=255)
    keywords: Optional[List[KeywordSchema]] = None
    summary: Optional[Dict[str, Any]] = None
    sentiment: Optional[Dict[str, Any]] = None
    tags: Optional[List[str]] = None
    is_public: Optional[bool] = None


class DocumentAnalyzeRequest(CamelModel):
    force_regenerate: bool = False


class DocumentListItem(OrmCamelModel):
    """Document without its text body."""

    id: int
    original_name: str
    file_name: str
    file_size: int
    file_type: str
    tags: Optional[List[str]] = None
    is_public: bool = False
    upload_date: datetime
    last_accessed: datetime
    last_modified: datetime


class DocumentResponse(DocumentListItem):
    """Full document details."""

    extracted_text: str
    metadata: Optional[Dict[str, Any]] = Field(None, validation_alias="metadata_json")
    keywords: Optional[List[Dict[str, Any]]] = Field(None, validation_alias="keywords_json")
    summary: Optional[Dict[str, Any]] = Field(None, validation_alias="summary_json")
    sentiment: Optional[Dict[str, Any]] = Field(None, validation_alias="sentiment_json")


class DocumentUploadResponse(CamelModel):
    """Schema for document upload response."""

    id: int
    original_name: str
    file_size: int
    word_count: int
    status: str = "uploaded"
    message: str = "Document uploaded successfully"


class DocumentAnalysisResponse(CamelModel):
    document: DocumentResponse
    sources: Dict[str, str]


# ---------------------------------------------------------------------------
# Annotations
# ---------------------------------------------------------------------------

class AnnotationCreate(CamelModel):
    type: AnnotationTypeSchema
    selected_text: str = Field(..., min_length=1)
    position: Dict[str, Any]
    note: Optional[str] = None
    color: str = Field("#ffeb3b", max_length=20)


class AnnotationReplyCreate(CamelModel):
    note: str = Field(..., min_length=1)


class AnnotationUpdate(CamelModel):
    note: Optional[str] = None
    color: Optional[str] = Field(None, max_length=20)


class AnnotationResponse(OrmCamelModel):
    id: int
    document_id: int
    user_id: str
    parent_id: Optional[int] = None
    type: AnnotationTypeSchema
    selected_text: str
    note: Optional[str] = None
    color: str
    position: Optional[Dict[str, Any]] = Field(None, validation_alias="position_json")
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Invites
# ---------------------------------------------------------------------------

class InviteCreate(CamelModel):
    email: str = Field(..., min_length=3, max_length=255)
    name: Optional[str] = Field(None, max_length=255)
    message: Optional[str] = None


class InviteResponse(OrmCamelModel):
    id: int
    document_id: int
    invitee_email: str
    invitee_name: Optional[str] = None
    message: Optional[str] = None
    token: str
    expires_at: datetime
    is_used: bool
    created_at: datetime
    invite_url: Optional[str] = None


class SharedDocumentResponse(CamelModel):
    """What a token holder sees."""

    document: DocumentResponse
    invite: InviteResponse


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------

class UserProfile(OrmCamelModel):
    id: str
    email: str
    name: Optional[str] = None
    created_at: datetime


class UserSettingsResponse(CamelModel):
    user: UserProfile
    settings: Dict[str, Dict[str, Any]]


class UserSettingsUpdate(CamelModel):
    name: Optional[str] = Field(None, max_length=255)
    notifications: Optional[Dict[str, Any]] = None
    privacy: Optional[Dict[str, Any]] = None
    preferences: Optional[Dict[str, Any]] = None
    security: Optional[Dict[str, Any]] = None


# Health Check
class HealthCheckResponse(BaseModel):
    """Schema for health check response."""

    status: str
    database: str
    llm: str
    timestamp: datetime
