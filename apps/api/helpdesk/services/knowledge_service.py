"""Knowledge base ingestion: chunk, embed and store source documents."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from langchain_text_splitters import RecursiveCharacterTextSplitter
from sqlalchemy.orm import Session

from helpdesk.core.config import settings
from helpdesk.db.enums import KnowledgeSourceType
from helpdesk.db.models import KnowledgeBaseEmbedding
from helpdesk.services.ai_provider import AIProvider

logger = logging.getLogger(__name__)


@dataclass
class KnowledgeSourceInput:
    organization_id: UUID
    source_type: KnowledgeSourceType
    source_id: str
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)


def format_source_content(source_type: KnowledgeSourceType, content: str) -> str:
    """FAQs are stored as question (first line) and answer (the rest)."""
    if source_type != KnowledgeSourceType.FAQ:
        return content
    question, _, answer = content.partition("\n")
    return f"--- Question ---\n{question}\n--- Answer ---\n{answer}"


def split_content(content: str) -> list[str]:
    splitter = RecursiveCharacterTextSplitter(
        chunk_size=settings.KNOWLEDGE_CHUNK_SIZE,
        chunk_overlap=settings.KNOWLEDGE_CHUNK_OVERLAP,
    )
    return [chunk for chunk in splitter.split_text(content) if chunk.strip()]


def delete_source(
    db: Session,
    org_id: UUID,
    source_type: KnowledgeSourceType,
    source_id: str,
    commit: bool = True,
) -> int:
    """Remove every stored chunk for one source. Returns the row count."""
    deleted = (
        db.query(KnowledgeBaseEmbedding)
        .filter(
            KnowledgeBaseEmbedding.organization_id == org_id,
            KnowledgeBaseEmbedding.source_type == source_type.value,
            KnowledgeBaseEmbedding.source_id == source_id,
        )
        .delete(synchronize_session=False)
    )
    if commit:
        db.commit()
    return deleted


async def index_source(
    db: Session, provider: AIProvider, source: KnowledgeSourceInput
) -> list[KnowledgeBaseEmbedding]:
    """
    (Re)index one knowledge source.

    Previous chunks for the same source are replaced in the same commit, so a
    failed embedding call leaves the old rows searchable.
    """
    chunks = split_content(format_source_content(source.source_type, source.content))
    if not chunks:
        raise ValueError("Knowledge source has no indexable content")

    embeddings = await provider.embed(chunks)
    if len(embeddings) != len(chunks):
        raise ValueError(
            f"Embedding count mismatch: {len(embeddings)} for {len(chunks)} chunks"
        )

    delete_source(db, source.organization_id, source.source_type, source.source_id, commit=False)
    rows = [
        KnowledgeBaseEmbedding(
            organization_id=source.organization_id,
            source_type=source.source_type.value,
            source_id=source.source_id,
            chunk_index=index,
            content=chunk,
            content_embedding=embedding,
            metadata_={**source.metadata, "total_chunks": len(chunks)},
        )
        for index, (chunk, embedding) in enumerate(zip(chunks, embeddings))
    ]
    db.add_all(rows)
    db.commit()
    logger.info(
        "Indexed %s %s into %d chunk(s)",
        source.source_type.value,
        source.source_id,
        len(rows),
    )
    return rows


def list_source_chunks(
    db: Session, org_id: UUID, source_type: KnowledgeSourceType, source_id: str
) -> list[KnowledgeBaseEmbedding]:
    return (
        db.query(KnowledgeBaseEmbedding)
        .filter(
            KnowledgeBaseEmbedding.organization_id == org_id,
            KnowledgeBaseEmbedding.source_type == source_type.value,
            KnowledgeBaseEmbedding.source_id == source_id,
        )
        .order_by(KnowledgeBaseEmbedding.chunk_index)
        .all()
    )
