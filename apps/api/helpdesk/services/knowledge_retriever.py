"""Fetch knowledge base passages relevant to a customer message."""

from __future__ import annotations

import logging
from uuid import UUID

import httpx
from sqlalchemy.exc import SQLAlchemyError

from helpdesk.core.exceptions import KnowledgeSearchError
from helpdesk.services.knowledge_index import KnowledgeIndex, KnowledgePassage

logger = logging.getLogger(__name__)


class KnowledgeRetriever:
    """Thin policy layer over a KnowledgeIndex: fixed threshold and result count."""

    def __init__(self, index: KnowledgeIndex, *, match_threshold: float, match_count: int):
        self.index = index
        self.match_threshold = match_threshold
        self.match_count = match_count

    async def retrieve(
        self,
        text: str,
        organization_id: UUID,
        *,
        match_count: int | None = None,
    ) -> list[KnowledgePassage]:
        """
        Return passages in the order the index ranked them.

        No match is a normal outcome (empty list). Index failures raise
        KnowledgeSearchError.
        """
        try:
            passages = await self.index.search(
                text,
                organization_id=organization_id,
                match_threshold=self.match_threshold,
                match_count=match_count or self.match_count,
            )
        except (httpx.HTTPError, SQLAlchemyError, ValueError) as exc:
            raise KnowledgeSearchError(
                f"Knowledge search failed: {type(exc).__name__}: {exc}"
            ) from exc

        logger.debug("Knowledge search returned %d passage(s)", len(passages))
        return passages
