"""CLI tools for helpdesk administration."""

import asyncio
from pathlib import Path
from uuid import UUID

import click
import httpx
from sqlalchemy.exc import SQLAlchemyError

from helpdesk.core.exceptions import HelpdeskError
from helpdesk.db.enums import JobStatus, KnowledgeSourceType
from helpdesk.db.session import SessionLocal
from helpdesk.services import job_service, knowledge_service, org_service, ticketing_service
from helpdesk.services.ai_provider import get_configured_provider


@click.group()
def cli():
    """Helpdesk CLI tools."""
    pass


@cli.command()
@click.option("--name", required=True, help="Organization name")
@click.option("--slug", required=True, help="URL-friendly slug (lowercase, no spaces)")
@click.option("--ai/--no-ai", "ai_enabled", default=True, help="Enable AI ticket processing")
def create_org(name: str, slug: str, ai_enabled: bool):
    """
    Create an organization.

    Example:
        python -m helpdesk.cli create-org --name "Acme Corp" --slug "acme"
    """
    slug = slug.lower().strip()
    if not slug.replace("-", "").replace("_", "").isalnum():
        click.echo("❌ Slug must be alphanumeric (with optional hyphens/underscores)")
        return

    with SessionLocal() as db:
        if org_service.get_org_by_slug(db, slug):
            click.echo(f"❌ Organization with slug '{slug}' already exists")
            return
        org = org_service.create_org(db, name=name, slug=slug, ai_enabled=ai_enabled)
        click.echo(f"✓ Created organization: {name}")
        click.echo(f"  ID: {org.id}")
        click.echo(f"  Slug: {slug}")
        click.echo(f"  AI enabled: {org.ai_enabled}")


@cli.command()
@click.option("--ticket-id", required=True, type=click.UUID, help="Ticket ID")
@click.option("--message-id", required=True, type=click.UUID, help="Customer message ID")
def process_message(ticket_id: UUID, message_id: UUID):
    """
    Queue the AI pipeline for one message and run it in this process.

    Uses the same job record as the HTTP trigger, so a message that was
    already queued or processed is not run a second time.

    Example:
        python -m helpdesk.cli process-message --ticket-id <uuid> --message-id <uuid>
    """
    from helpdesk.jobs.runner import execute_claimed_job

    with SessionLocal() as db:
        try:
            ticket = ticketing_service.require_ticket(db, ticket_id)
            ticketing_service.require_ticket_message(db, ticket_id, message_id)
        except HelpdeskError as e:
            click.echo(f"❌ {e}")
            raise SystemExit(1)

        job, created = job_service.schedule_ticket_message_job(
            db, org_id=ticket.organization_id, ticket_id=ticket_id, message_id=message_id
        )
        if not created:
            click.echo(f"Job {job.id} already exists (deduplicated)")

        claimed = job_service.claim_job(db, job.id)
        if claimed:
            job = asyncio.run(execute_claimed_job(db, claimed))
        else:
            click.echo(f"  Not run: job is {job.status}")

        result = job.result or {}
        click.echo(f"✓ Job {job.id}: {job.status}")
        if result.get("outcome"):
            click.echo(f"  Outcome: {result['outcome']}")
        if result.get("flag_reason"):
            click.echo(f"  Flagged: {result['flag_reason']}")
        if result.get("agent_result"):
            click.echo(f"  Next action: {result['agent_result']['next_action']}")
            click.echo(f"  Transition: {result.get('transition')}")
        if job.status == JobStatus.FAILED.value:
            click.echo(f"❌ Error: {job.last_error}")
            raise SystemExit(1)



@cli.command()
@click.option("--org-slug", required=True, help="Organization slug")
@click.option(
    "--source-type",
    required=True,
    type=click.Choice([t.value for t in KnowledgeSourceType]),
    help="Knowledge source type",
)
@click.option("--source-id", required=True, help="Stable ID of the source document")
@click.option(
    "--file",
    "path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="UTF-8 text file to index (FAQs: first line is the question)",
)
def index_knowledge(org_slug: str, source_type: str, source_id: str, path: Path):
    """
    Chunk, embed and store a knowledge source, replacing any previous version.

    Example:
        python -m helpdesk.cli index-knowledge --org-slug acme \\
            --source-type faq --source-id reset-password --file reset.txt
    """
    with SessionLocal() as db:
        org = org_service.get_org_by_slug(db, org_slug)
        if not org:
            click.echo(f"❌ Organization not found: {org_slug}")
            return

        source = knowledge_service.KnowledgeSourceInput(
            organization_id=org.id,
            source_type=KnowledgeSourceType(source_type),
            source_id=source_id,
            content=path.read_text(encoding="utf-8"),
        )
        try:
            rows = asyncio.run(
                knowledge_service.index_source(db, get_configured_provider(), source)
            )
        except (httpx.HTTPError, ValueError, SQLAlchemyError) as e:
            db.rollback()
            click.echo(f"❌ Error: {e}")
            return

        click.echo(f"✓ Indexed {source_type} {source_id} into {len(rows)} chunk(s)")


@cli.command()
def check_ai_key():
    """Verify the configured AI provider accepts the API key."""
    if asyncio.run(get_configured_provider().validate_key()):
        click.echo("✓ AI provider key is valid")
    else:
        click.echo("❌ AI provider rejected the key")
        raise SystemExit(1)


@cli.command()
def run_worker():
    """Start the background job worker (same as python -m helpdesk.worker)."""
    from helpdesk.worker import main

    main()


if __name__ == "__main__":
    cli()
