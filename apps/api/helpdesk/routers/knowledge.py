"""Knowledge base ingestion APIs."""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from uuid import UUID

from sqlalchemy.orm import Session

from helpdesk.core.config import settings
from helpdesk.core.deps import get_db, require_internal_secret
from helpdesk.db.enums import JobType, KnowledgeSourceType
from helpdesk.jobs.runner import run_job_now
from helpdesk.schemas.knowledge import (
    KnowledgeSourceCreate,
    KnowledgeSourceDeleted,
    KnowledgeSourceQueued,
)
from helpdesk.services import job_service, knowledge_service, org_service

router = APIRouter(
    prefix="/knowledge",
    tags=["Knowledge"],
    dependencies=[Depends(require_internal_secret)],
)


@router.post(
    "/sources",
    response_model=KnowledgeSourceQueued,
    status_code=status.HTTP_202_ACCEPTED,
)
def queue_source(
    data: KnowledgeSourceCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
) -> KnowledgeSourceQueued:
    """Queue a source for chunking and embedding; replaces any previous version."""
    if not org_service.get_org_by_id(db, data.organization_id):
        raise HTTPException(status_code=404, detail="Organization not found")

    job = job_service.schedule_job(
        db,
        org_id=data.organization_id,
        job_type=JobType.KNOWLEDGE_INDEX,
        payload={
            "source_type": data.source_type.value,
            "source_id": data.source_id,
            "content": data.content,
            "metadata": data.metadata,
        },
    )
    if settings.AI_PIPELINE_INLINE:
        background_tasks.add_task(run_job_now, job.id)
    return KnowledgeSourceQueued(job_id=job.id, status=job.status)


@router.delete(
    "/sources/{source_type}/{source_id}",
    response_model=KnowledgeSourceDeleted,
)
def delete_source(
    source_type: KnowledgeSourceType,
    source_id: str,
    organization_id: UUID,
    db: Session = Depends(get_db),
) -> KnowledgeSourceDeleted:
    """Remove every indexed chunk of a source."""
    deleted = knowledge_service.delete_source(db, organization_id, source_type, source_id)
    return KnowledgeSourceDeleted(deleted_chunks=deleted)
