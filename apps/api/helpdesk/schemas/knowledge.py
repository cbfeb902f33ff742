"""Pydantic schemas for knowledge base ingestion."""

from uuid import UUID

from pydantic import BaseModel, Field

from helpdesk.db.enums import KnowledgeSourceType


class KnowledgeSourceCreate(BaseModel):
    """Queue a source (FAQ, article or extracted file text) for indexing."""

    organization_id: UUID
    source_type: KnowledgeSourceType
    source_id: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    metadata: dict = Field(default_factory=dict)


class KnowledgeSourceQueued(BaseModel):
    job_id: UUID
    status: str


class KnowledgeSourceDeleted(BaseModel):
    deleted_chunks: int
