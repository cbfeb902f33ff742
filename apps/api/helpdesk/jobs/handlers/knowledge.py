"""Knowledge base indexing job handler."""

from __future__ import annotations

from helpdesk.db.enums import KnowledgeSourceType
from helpdesk.services import knowledge_service
from helpdesk.services.ai_provider import get_configured_provider


async def process_knowledge_index(db, job) -> dict:
    """Chunk, embed and store one knowledge source."""
    payload = job.payload or {}
    source_id = payload.get("source_id")
    content = payload.get("content")
    if not source_id or not content:
        raise ValueError("Missing source_id or content in job payload")

    source = knowledge_service.KnowledgeSourceInput(
        organization_id=job.organization_id,
        source_type=KnowledgeSourceType(payload.get("source_type")),
        source_id=str(source_id),
        content=content,
        metadata=payload.get("metadata") or {},
    )
    rows = await knowledge_service.index_source(db, get_configured_provider(), source)
    return {
        "source_type": source.source_type.value,
        "source_id": source.source_id,
        "chunks": len(rows),
    }
