"""Tests for job scheduling, idempotency and claiming."""

import uuid

from helpdesk.db.enums import JobStatus, JobType
from helpdesk.db.models import Job
from helpdesk.services import job_service


def test_schedule_ticket_message_job_is_single_attempt(db, test_ticket, test_customer_message):
    job, created = job_service.schedule_ticket_message_job(
        db, test_ticket.organization_id, test_ticket.id, test_customer_message.id
    )

    assert created is True
    assert job.status == JobStatus.PENDING.value
    assert job.job_type == JobType.TICKET_MESSAGE_PROCESS.value
    assert job.max_attempts == 1
    assert job.attempts == 0
    assert job.idempotency_key == f"ticket_message_process:{test_customer_message.id}"
    assert job.payload == {
        "ticket_id": str(test_ticket.id),
        "message_id": str(test_customer_message.id),
    }


def test_duplicate_trigger_returns_existing_job(db, test_ticket, test_customer_message):
    first, _ = job_service.schedule_ticket_message_job(
        db, test_ticket.organization_id, test_ticket.id, test_customer_message.id
    )
    second, created = job_service.schedule_ticket_message_job(
        db, test_ticket.organization_id, test_ticket.id, test_customer_message.id
    )

    assert created is False
    assert second.id == first.id
    assert db.query(Job).count() == 1


def test_duplicate_trigger_after_completion_does_not_rerun(db, test_ticket, test_customer_message):
    job, _ = job_service.schedule_ticket_message_job(
        db, test_ticket.organization_id, test_ticket.id, test_customer_message.id
    )
    job = job_service.claim_job(db, job.id)
    job_service.mark_job_succeeded(db, job, result={"outcome": "replied"})

    again, created = job_service.schedule_ticket_message_job(
        db, test_ticket.organization_id, test_ticket.id, test_customer_message.id
    )

    assert created is False
    assert again.status == JobStatus.SUCCEEDED.value
    assert job_service.get_pending_jobs(db) == []


def test_claim_job_only_once(db, test_org):
    job = job_service.schedule_job(db, test_org.id, JobType.KNOWLEDGE_INDEX, {"source_id": "a"})

    claimed = job_service.claim_job(db, job.id)
    assert claimed is not None
    assert claimed.status == JobStatus.RUNNING.value
    assert claimed.attempts == 1
    assert claimed.started_at is not None

    assert job_service.claim_job(db, job.id) is None


def test_claim_pending_jobs_takes_due_jobs(db, test_org):
    for i in range(3):
        job_service.schedule_job(db, test_org.id, JobType.KNOWLEDGE_INDEX, {"source_id": str(i)})

    claimed = job_service.claim_pending_jobs(db, limit=2)

    assert len(claimed) == 2
    assert all(job.status == JobStatus.RUNNING.value for job in claimed)
    assert len(job_service.get_pending_jobs(db)) == 1


def test_mark_job_failed_retries_until_max_attempts(db, test_org):
    job = job_service.schedule_job(
        db, test_org.id, JobType.KNOWLEDGE_INDEX, {"source_id": "a"}, max_attempts=2
    )

    job = job_service.claim_job(db, job.id)
    job = job_service.mark_job_failed(db, job, "embedding call failed")
    assert job.status == JobStatus.PENDING.value
    assert job.last_error == "embedding call failed"
    assert job.completed_at is None

    job = job_service.claim_job(db, job.id)
    job = job_service.mark_job_failed(db, job, "embedding call failed again")
    assert job.status == JobStatus.FAILED.value
    assert job.attempts == 2
    assert job.completed_at is not None


def test_pipeline_job_fails_after_first_attempt(db, test_ticket, test_customer_message):
    job, _ = job_service.schedule_ticket_message_job(
        db, test_ticket.organization_id, test_ticket.id, test_customer_message.id
    )
    job = job_service.claim_job(db, job.id)

    job = job_service.mark_job_failed(db, job, "boom", result={"outcome": "failed"})

    assert job.status == JobStatus.FAILED.value
    assert job.result == {"outcome": "failed"}


def test_get_job_scoped_to_org(db, test_org):
    job = job_service.schedule_job(db, test_org.id, JobType.KNOWLEDGE_INDEX, {})

    assert job_service.get_job(db, job.id, org_id=test_org.id).id == job.id
    assert job_service.get_job(db, job.id, org_id=uuid.uuid4()) is None


def test_list_jobs_filters(db, test_ticket, test_customer_message):
    org_id = test_ticket.organization_id
    job_service.schedule_job(db, org_id, JobType.KNOWLEDGE_INDEX, {})
    job_service.schedule_ticket_message_job(db, org_id, test_ticket.id, test_customer_message.id)

    assert len(job_service.list_jobs(db, org_id)) == 2
    [only] = job_service.list_jobs(db, org_id, job_type=JobType.TICKET_MESSAGE_PROCESS)
    assert only.job_type == JobType.TICKET_MESSAGE_PROCESS.value
