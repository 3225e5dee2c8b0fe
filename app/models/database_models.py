"""
SQLAlchemy ORM models for DocSense.

Timestamps are naive UTC and set on the Python side so every backend
(asyncpg in production, aiosqlite in tests) stores the same values.
"""
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
    Boolean,
    Enum as SQLEnum,
    JSON,
)
from sqlalchemy.orm import relationship
import enum

from app.database import Base
from app.utils.helpers import utcnow


# Enums
class AnnotationType(str, enum.Enum):
    """Kinds of annotation a reader can leave on a document."""

    HIGHLIGHT = "highlight"
    NOTE = "note"


# Models
class User(Base):
    """User account (identity asserted by the fronting session layer)."""

    __tablename__ = "users"

    id = Column(String(255), primary_key=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=True)
    settings_json = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    documents = relationship("Document", back_populates="user", passive_deletes=True)


class Document(Base):
    """Uploaded document with extracted text and stored analysis results."""

    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    file_name = Column(String(255), nullable=False)  # name on disk
    original_name = Column(String(255), nullable=False)
    file_path = Column(String(512), nullable=True)
    file_size = Column(Integer, nullable=False, default=0)
    file_type = Column(String(100), nullable=False, default="application/pdf")
    extracted_text = Column(Text, nullable=False, default="")
    metadata_json = Column(JSON, nullable=True)  # page count, author, etc.

    # Analysis results
    keywords_json = Column(JSON, nullable=True)
    summary_json = Column(JSON, nullable=True)
    sentiment_json = Column(JSON, nullable=True)

    tags = Column(JSON, nullable=True)
    is_public = Column(Boolean, default=False, nullable=False)

    upload_date = Column(DateTime, default=utcnow, nullable=False)
    last_accessed = Column(DateTime, default=utcnow, nullable=False)
    # set explicitly on edits so reads (last_accessed) do not bump it
    last_modified = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="documents")
    annotations = relationship("Annotation", back_populates="document", passive_deletes=True)
    invites = relationship("DocumentInvite", back_populates="document", passive_deletes=True)


class Annotation(Base):
    """Highlight or note on a span of a document; replies point at a parent."""

    __tablename__ = "annotations"

    id = Column(Integer, primary_key=True, index=True)
    document_id = Column(Integer, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    parent_id = Column(Integer, ForeignKey("annotations.id", ondelete="CASCADE"), nullable=True, index=True)
    type = Column(SQLEnum(AnnotationType), nullable=False)
    selected_text = Column(Text, nullable=False, default="")
    note = Column(Text, nullable=True)
    color = Column(String(20), nullable=False, default="#ffeb3b")
    position_json = Column(JSON, nullable=True)  # start / end offsets, page
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    document = relationship("Document", back_populates="annotations")


class DocumentInvite(Base):
    """Token granting read access (and annotation rights) to one document."""

    __tablename__ = "document_invites"

    id = Column(Integer, primary_key=True, index=True)
    document_id = Column(Integer, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True)
    invited_by = Column(String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    invitee_email = Column(String(255), nullable=False, index=True)
    invitee_name = Column(String(255), nullable=True)
    message = Column(Text, nullable=True)
    token = Column(String(128), nullable=False, unique=True, index=True)
    expires_at = Column(DateTime, nullable=False)
    is_used = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    document = relationship("Document", back_populates="invites")
