"""Database models for manuscripts, their folder/document tree, and bookkeeping."""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import JSON, Column, Text
from sqlmodel import Field, SQLModel


def _new_id() -> str:
    return str(uuid4())


def utcnow() -> datetime:
    """Timezone-aware current time; naive datetimes are rejected on insert."""
    return datetime.now(timezone.utc)


VARIANT_FOLDER_TYPE = "variant"


# ---------------------------------------------------------------------------
# Manuscript tree
# ---------------------------------------------------------------------------


class Manuscript(SQLModel, table=True):
    """Top-level writing project holding a tree of folders and documents."""

    __tablename__ = "manuscript"

    id: str = Field(default_factory=_new_id, primary_key=True, max_length=36)
    title: str = Field(max_length=500, nullable=False)
    subtitle: Optional[str] = Field(default=None, max_length=500)
    status: str = Field(default="draft", max_length=32, nullable=False)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)
    deleted_at: Optional[datetime] = Field(default=None)


class Folder(SQLModel, table=True):
    """Folder node; ``parent_id`` of None places it at the manuscript root."""

    __tablename__ = "folder"

    id: str = Field(default_factory=_new_id, primary_key=True, max_length=36)
    manuscript_id: str = Field(foreign_key="manuscript.id", nullable=False, index=True)
    parent_id: Optional[str] = Field(default=None, index=True, max_length=36)
    title: str = Field(max_length=500, nullable=False)
    folder_type: Optional[str] = Field(default=None, max_length=32)
    sort_order: float = Field(nullable=False)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)
    deleted_at: Optional[datetime] = Field(default=None)


class Document(SQLModel, table=True):
    """Leaf document; its HTML body is stored on disk by the content store."""

    __tablename__ = "document"

    id: str = Field(default_factory=_new_id, primary_key=True, max_length=36)
    manuscript_id: str = Field(foreign_key="manuscript.id", nullable=False, index=True)
    parent_id: Optional[str] = Field(default=None, index=True, max_length=36)
    title: str = Field(max_length=500, nullable=False)
    synopsis: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    word_count: int = Field(default=0, nullable=False)
    compile_include: bool = Field(default=True, nullable=False)
    sort_order: float = Field(nullable=False)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)
    deleted_at: Optional[datetime] = Field(default=None)


# ---------------------------------------------------------------------------
# Search index and audit trail
# ---------------------------------------------------------------------------


class SearchEntry(SQLModel, table=True):
    """Plaintext search index row for one document."""

    __tablename__ = "search_entry"

    id: Optional[int] = Field(default=None, primary_key=True)
    doc_id: str = Field(nullable=False, index=True, max_length=36)
    title: str = Field(max_length=500, nullable=False)
    content: str = Field(sa_column=Column(Text, nullable=False))


class AuditLog(SQLModel, table=True):
    """Significant user action recorded against an entity."""

    __tablename__ = "audit_log"

    id: str = Field(default_factory=_new_id, primary_key=True, max_length=36)
    user_id: str = Field(nullable=False, index=True, max_length=64)
    action: str = Field(nullable=False, index=True, max_length=120)
    entity_type: Optional[str] = Field(default=None, max_length=64)
    entity_id: Optional[str] = Field(default=None, max_length=36)
    details: Optional[dict] = Field(default=None, sa_column=Column(JSON, nullable=True))
    created_at: datetime = Field(default_factory=utcnow, nullable=False)


__all__ = [
    "Manuscript",
    "Folder",
    "Document",
    "SearchEntry",
    "AuditLog",
    "VARIANT_FOLDER_TYPE",
    "utcnow",
]
