"""Knowledge base embedding ORM model."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.core.config import settings
from helpdesk.db.base import Base, JSONType
from helpdesk.db.types import EmbeddingVector


class KnowledgeBaseEmbedding(Base):
    """One embedded chunk of an FAQ, article or uploaded file."""

    __tablename__ = "knowledge_base_embeddings"
    __table_args__ = (
        Index("idx_kb_embeddings_org", "organization_id"),
        Index("idx_kb_embeddings_source", "source_type", "source_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    source_type: Mapped[str] = mapped_column(String(20), nullable=False)
    source_id: Mapped[str] = mapped_column(String(255), nullable=False)
    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    content_embedding: Mapped[list[float]] = mapped_column(
        EmbeddingVector(settings.EMBEDDING_DIMENSIONS), nullable=False
    )
    # "metadata" is reserved on declarative classes
    metadata_: Mapped[dict] = mapped_column("metadata", JSONType, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
