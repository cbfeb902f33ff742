"""Execute claimed jobs and record their outcome on the job row."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from helpdesk.core.exceptions import PipelineRunError
from helpdesk.core.structured_logging import build_log_context
from helpdesk.db.models import Job
from helpdesk.db.session import SessionLocal
from helpdesk.jobs.registry import resolve_job_handler
from helpdesk.services import job_service

logger = logging.getLogger(__name__)


async def execute_claimed_job(db: Session, job: Job) -> Job:
    """Run a job already moved to `running` and mark it succeeded or failed."""
    log_context = build_log_context(org_id=job.organization_id, job_id=job.id)
    logger.info(
        "Processing job (type=%s, attempt=%d)", job.job_type, job.attempts, extra=log_context
    )
    try:
        handler = resolve_job_handler(job.job_type)
        result = await handler(db, job)
    except PipelineRunError as exc:
        logger.error("Job failed: %s", type(exc).__name__, extra=log_context)
        return job_service.mark_job_failed(db, job, str(exc), result=exc.result)
    except Exception as exc:
        logger.error("Job failed: %s", type(exc).__name__, extra=log_context)
        db.rollback()
        return job_service.mark_job_failed(db, job, str(exc) or type(exc).__name__)

    logger.info("Job completed successfully", extra=log_context)
    return job_service.mark_job_succeeded(db, job, result=result)


async def run_job_now(job_id: UUID) -> None:
    """
    Claim and run one job in its own session.

    Used for inline execution right after scheduling. If the worker already
    claimed the job this is a no-op.
    """
    with SessionLocal() as db:
        job = job_service.claim_job(db, job_id)
        if not job:
            logger.info("Job already claimed", extra=build_log_context(job_id=job_id))
            return
        await execute_claimed_job(db, job)
