"""Job service - business logic for background job scheduling and processing."""

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from helpdesk.db.models import Job
from helpdesk.db.enums import JobStatus, JobType


def _now() -> datetime:
    return datetime.now(timezone.utc)


def ticket_message_idempotency_key(message_id: UUID) -> str:
    return f"{JobType.TICKET_MESSAGE_PROCESS.value}:{message_id}"


def schedule_job(
    db: Session,
    org_id: UUID,
    job_type: JobType,
    payload: dict,
    run_at: datetime | None = None,
    idempotency_key: str | None = None,
    max_attempts: int = 3,
) -> Job:
    """
    Schedule a new background job.

    If run_at is None, the job runs immediately.
    If idempotency_key is provided, duplicate jobs with same key will fail
    with IntegrityError (caller should catch and handle).
    """
    job = Job(
        organization_id=org_id,
        job_type=job_type.value,
        payload=payload,
        run_at=run_at or _now(),
        status=JobStatus.PENDING.value,
        idempotency_key=idempotency_key,
        max_attempts=max_attempts,
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


def schedule_job_once(
    db: Session,
    org_id: UUID,
    job_type: JobType,
    payload: dict,
    idempotency_key: str,
    max_attempts: int = 3,
) -> tuple[Job, bool]:
    """
    Schedule a job unless one with the same idempotency key exists.

    Returns (job, created). A duplicate returns the existing job untouched,
    whatever state it is in.
    """
    existing = get_job_by_idempotency_key(db, idempotency_key)
    if existing:
        return existing, False
    try:
        job = schedule_job(
            db,
            org_id=org_id,
            job_type=job_type,
            payload=payload,
            idempotency_key=idempotency_key,
            max_attempts=max_attempts,
        )
    except IntegrityError:
        # Lost the race to a concurrent trigger for the same key.
        db.rollback()
        existing = get_job_by_idempotency_key(db, idempotency_key)
        if not existing:
            raise
        return existing, False
    return job, True


def schedule_ticket_message_job(
    db: Session, org_id: UUID, ticket_id: UUID, message_id: UUID
) -> tuple[Job, bool]:
    """Enqueue the AI pipeline for one inbound message (single attempt)."""
    return schedule_job_once(
        db,
        org_id=org_id,
        job_type=JobType.TICKET_MESSAGE_PROCESS,
        payload={"ticket_id": str(ticket_id), "message_id": str(message_id)},
        idempotency_key=ticket_message_idempotency_key(message_id),
        max_attempts=1,
    )


def get_job_by_idempotency_key(db: Session, idempotency_key: str) -> Job | None:
    return db.query(Job).filter(Job.idempotency_key == idempotency_key).first()


def get_pending_jobs(db: Session, limit: int = 10) -> list[Job]:
    """
    Get pending jobs that are due to run.

    Returns jobs where status='pending' and run_at <= now, ordered by run_at.
    """
    return (
        db.query(Job)
        .filter(
            Job.status == JobStatus.PENDING.value,
            Job.run_at <= _now(),
        )
        .order_by(Job.run_at)
        .limit(limit)
        .all()
    )


def get_job(db: Session, job_id: UUID, org_id: UUID | None = None) -> Job | None:
    """Get a job by ID, optionally scoped to org."""
    query = db.query(Job).filter(Job.id == job_id)
    if org_id:
        query = query.filter(Job.organization_id == org_id)
    return query.first()


def list_jobs(
    db: Session,
    org_id: UUID,
    status: JobStatus | None = None,
    job_type: JobType | None = None,
    limit: int = 50,
) -> list[Job]:
    """List jobs for an organization with optional filters."""
    query = db.query(Job).filter(Job.organization_id == org_id)
    if status:
        query = query.filter(Job.status == status.value)
    if job_type:
        query = query.filter(Job.job_type == job_type.value)
    return query.order_by(Job.created_at.desc()).limit(limit).all()


def claim_job(db: Session, job_id: UUID) -> Job | None:
    """
    Move a job from pending to running (increment attempts).

    The conditional UPDATE lets exactly one caller win; everyone else gets
    None. The inline runner and the worker both go through here.
    """
    result = db.execute(
        update(Job)
        .where(Job.id == job_id, Job.status == JobStatus.PENDING.value)
        .values(
            status=JobStatus.RUNNING.value,
            attempts=Job.attempts + 1,
            started_at=_now(),
        )
        .execution_options(synchronize_session=False)
    )
    db.commit()
    if result.rowcount != 1:
        return None
    job = db.get(Job, job_id)
    db.refresh(job)
    return job


def claim_pending_jobs(db: Session, limit: int = 10) -> list[Job]:
    """Claim up to `limit` due jobs, skipping any another runner took first."""
    claimed = []
    for job in get_pending_jobs(db, limit=limit):
        job = claim_job(db, job.id)
        if job:
            claimed.append(job)
    return claimed


def mark_job_succeeded(db: Session, job: Job, result: dict | None = None) -> Job:
    """Mark a job as succeeded, recording its result."""
    job.status = JobStatus.SUCCEEDED.value
    job.completed_at = _now()
    job.last_error = None
    if result is not None:
        job.result = result
    db.commit()
    db.refresh(job)
    return job


def mark_job_failed(db: Session, job: Job, error: str, result: dict | None = None) -> Job:
    """
    Mark a job as failed.

    If attempts < max_attempts, reset to pending for retry.
    """
    job.last_error = error
    if result is not None:
        job.result = result
    if job.attempts < job.max_attempts:
        job.status = JobStatus.PENDING.value
    else:
        job.status = JobStatus.FAILED.value
        job.completed_at = _now()
    db.commit()
    db.refresh(job)
    return job
