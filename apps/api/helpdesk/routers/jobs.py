"""Jobs router - inspect background jobs."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from helpdesk.core.deps import get_db, require_internal_secret
from helpdesk.db.enums import JobStatus, JobType
from helpdesk.schemas.job import JobListItem, JobRead
from helpdesk.services import job_service

router = APIRouter(
    prefix="/jobs",
    tags=["Jobs"],
    dependencies=[Depends(require_internal_secret)],
)


@router.get("", response_model=list[JobListItem])
def list_jobs(
    organization_id: UUID,
    status: JobStatus | None = None,
    job_type: JobType | None = None,
    limit: int = 50,
    db: Session = Depends(get_db),
):
    """List recent jobs for an organization."""
    return job_service.list_jobs(
        db,
        org_id=organization_id,
        status=status,
        job_type=job_type,
        limit=min(limit, 100),
    )


@router.get("/{job_id}", response_model=JobRead)
def get_job(
    job_id: UUID,
    db: Session = Depends(get_db),
):
    """Get a job by ID."""
    job = job_service.get_job(db, job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job
