"""Similarity search over the organization's knowledge base embeddings."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

import numpy as np
from sqlalchemy import text
from sqlalchemy.orm import Session

from helpdesk.db.models import KnowledgeBaseEmbedding
from helpdesk.db.types import to_vector_literal
from helpdesk.services.ai_provider import AIProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KnowledgePassage:
    """One retrieved knowledge base chunk and its similarity to the query."""

    source_type: str
    source_id: str
    content: str
    similarity: float
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_type": self.source_type,
            "source_id": self.source_id,
            "content": self.content,
            "metadata": dict(self.metadata),
            "similarity": self.similarity,
        }


class KnowledgeIndex(ABC):
    """Nearest-neighbour lookup over precomputed embeddings."""

    @abstractmethod
    async def search(
        self,
        query: str,
        *,
        organization_id: UUID,
        match_threshold: float,
        match_count: int,
    ) -> list[KnowledgePassage]:
        """Return up to match_count passages scoring >= match_threshold, best first."""
        pass


class PostgresKnowledgeIndex(KnowledgeIndex):
    """Delegate ranking to the `match_knowledge_base` SQL function (pgvector)."""

    MATCH_SQL = text(
        """
        SELECT source_type, source_id, content, metadata, similarity
        FROM match_knowledge_base(
            CAST(:query_embedding AS vector),
            :match_threshold,
            :match_count,
            :organization_id
        )
        """
    )

    def __init__(self, db: Session, provider: AIProvider):
        self.db = db
        self.provider = provider

    async def search(
        self,
        query: str,
        *,
        organization_id: UUID,
        match_threshold: float,
        match_count: int,
    ) -> list[KnowledgePassage]:
        [embedding] = await self.provider.embed([query])
        rows = self.db.execute(
            self.MATCH_SQL,
            {
                "query_embedding": to_vector_literal(embedding),
                "match_threshold": match_threshold,
                "match_count": match_count,
                "organization_id": organization_id,
            },
        ).mappings()
        return [
            KnowledgePassage(
                source_type=row["source_type"],
                source_id=str(row["source_id"]),
                content=row["content"],
                metadata=row["metadata"] or {},
                similarity=float(row["similarity"]),
            )
            for row in rows
        ]


class EmbeddingScanKnowledgeIndex(KnowledgeIndex):
    """
    Rank stored embeddings in process with cosine similarity.

    Portable fallback for databases without pgvector (local SQLite runs).
    """

    def __init__(self, db: Session, provider: AIProvider):
        self.db = db
        self.provider = provider

    async def search(
        self,
        query: str,
        *,
        organization_id: UUID,
        match_threshold: float,
        match_count: int,
    ) -> list[KnowledgePassage]:
        [embedding] = await self.provider.embed([query])
        rows = (
            self.db.query(KnowledgeBaseEmbedding)
            .filter(KnowledgeBaseEmbedding.organization_id == organization_id)
            .all()
        )
        if not rows:
            return []

        matrix = np.array([row.content_embedding for row in rows], dtype=np.float64)
        scores = cosine_similarities(embedding, matrix)
        ordering = np.argsort(-scores, kind="stable")[:match_count]

        return [
            KnowledgePassage(
                source_type=rows[i].source_type,
                source_id=rows[i].source_id,
                content=rows[i].content,
                metadata=rows[i].metadata_ or {},
                similarity=float(scores[i]),
            )
            for i in ordering
            if scores[i] >= match_threshold
        ]


def cosine_similarities(query: list[float], matrix: np.ndarray) -> np.ndarray:
    """Cosine similarity of `query` against each row of `matrix` (zero vectors score 0)."""
    vec = np.asarray(query, dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[1] != vec.shape[0]:
        raise ValueError(f"Embedding size mismatch: {vec.shape[0]} != {matrix.shape[-1]}")
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(vec)
    dots = matrix @ vec
    return np.divide(dots, norms, out=np.zeros_like(dots), where=norms > 0)



def get_knowledge_index(backend: str, db: Session, provider: AIProvider) -> KnowledgeIndex:
    """Factory for the configured index backend."""
    if backend == "postgres":
        return PostgresKnowledgeIndex(db, provider)
    if backend == "scan":
        return EmbeddingScanKnowledgeIndex(db, provider)
    raise ValueError(f"Unknown knowledge index backend: {backend}")
