"""Tests for the polling worker and admin CLI."""

import pytest
from click.testing import CliRunner

from ai_fakes import FakeProvider
from helpdesk import worker
from helpdesk.cli import cli
from helpdesk.db.enums import JobStatus, JobType
from helpdesk.db.models import Job, Organization
from helpdesk.services import job_service, ticket_pipeline_service


@pytest.mark.asyncio
async def test_process_pending_jobs_runs_batch(db, test_ticket, test_customer_message, monkeypatch):
    monkeypatch.setattr(ticket_pipeline_service, "get_configured_provider", lambda: FakeProvider())
    job, _ = job_service.schedule_ticket_message_job(
        db, test_ticket.organization_id, test_ticket.id, test_customer_message.id
    )

    ran = await worker.process_pending_jobs(batch_size=5)

    assert ran == 1
    db.expire_all()
    assert db.get(Job, job.id).status == JobStatus.SUCCEEDED.value
    assert await worker.process_pending_jobs(batch_size=5) == 0


@pytest.mark.asyncio
async def test_process_pending_jobs_records_handler_failure(db, test_org):
    job = job_service.schedule_job(db, test_org.id, JobType.KNOWLEDGE_INDEX, {}, max_attempts=1)

    await worker.process_pending_jobs(batch_size=5)

    db.expire_all()
    failed = db.get(Job, job.id)
    assert failed.status == JobStatus.FAILED.value
    assert failed.last_error == "Missing source_id or content in job payload"


def test_cli_create_org(db):
    runner = CliRunner()

    result = runner.invoke(cli, ["create-org", "--name", "Acme Corp", "--slug", "Acme", "--no-ai"])

    assert result.exit_code == 0
    assert "Created organization: Acme Corp" in result.output
    org = db.query(Organization).filter(Organization.slug == "acme").one()
    assert org.ai_enabled is False

    again = runner.invoke(cli, ["create-org", "--name", "Acme Corp", "--slug", "acme"])
    assert "already exists" in again.output


def test_cli_rejects_bad_slug(db):
    result = CliRunner().invoke(cli, ["create-org", "--name", "Bad", "--slug", "bad slug!"])

    assert "Slug must be alphanumeric" in result.output
    assert db.query(Organization).count() == 0


def test_cli_check_ai_key(monkeypatch):
    from helpdesk import cli as cli_module

    class RejectingProvider(FakeProvider):
        async def validate_key(self):
            return False

    monkeypatch.setattr(cli_module, "get_configured_provider", lambda: FakeProvider())
    ok = CliRunner().invoke(cli, ["check-ai-key"])
    assert ok.exit_code == 0
    assert "key is valid" in ok.output

    monkeypatch.setattr(cli_module, "get_configured_provider", lambda: RejectingProvider())
    rejected = CliRunner().invoke(cli, ["check-ai-key"])
    assert rejected.exit_code == 1


def test_cli_index_knowledge(db, test_org, tmp_path, monkeypatch):
    from helpdesk import cli as cli_module

    monkeypatch.setattr(cli_module, "get_configured_provider", lambda: FakeProvider())
    faq = tmp_path / "reset.txt"
    faq.write_text("How do I reset my password?\nUse the link on the login page.", encoding="utf-8")

    result = CliRunner().invoke(
        cli,
        [
            "index-knowledge",
            "--org-slug", test_org.slug,
            "--source-type", "faq",
            "--source-id", "reset-password",
            "--file", str(faq),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "into 1 chunk(s)" in result.output


def test_cli_process_message_runs_once(db, test_ticket, test_customer_message, monkeypatch):
    provider = FakeProvider()
    monkeypatch.setattr(ticket_pipeline_service, "get_configured_provider", lambda: provider)
    args = [
        "process-message",
        "--ticket-id", str(test_ticket.id),
        "--message-id", str(test_customer_message.id),
    ]

    first = CliRunner().invoke(cli, args)

    assert first.exit_code == 0, first.output
    assert "Outcome: replied" in first.output
    assert "Next action: close" in first.output
    assert len(provider.chat_calls) == 1

    second = CliRunner().invoke(cli, args)

    assert second.exit_code == 0, second.output
    assert "deduplicated" in second.output
    assert "Not run: job is succeeded" in second.output
    assert len(provider.chat_calls) == 1
    [job] = db.query(Job).all()
    assert job.idempotency_key == job_service.ticket_message_idempotency_key(test_customer_message.id)


def test_cli_process_message_unknown_message(db, test_ticket):
    result = CliRunner().invoke(
        cli,
        [
            "process-message",
            "--ticket-id", str(test_ticket.id),
            "--message-id", "00000000-0000-0000-0000-000000000000",
        ],
    )

    assert result.exit_code == 1
    assert db.query(Job).count() == 0
