"""Ticket intake, detail, update and AI processing APIs."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from helpdesk.core.config import settings
from helpdesk.core.deps import get_db, require_internal_secret
from helpdesk.core.exceptions import (
    AIResponseError,
    KnowledgeSearchError,
    MessageNotFoundError,
    TicketNotFoundError,
    TicketVersionConflictError,
)
from helpdesk.core.structured_logging import build_log_context
from helpdesk.db.enums import TicketPriority, UserRole
from helpdesk.db.models import Job, Ticket
from helpdesk.jobs.runner import run_job_now
from helpdesk.schemas.ticketing import (
    KnowledgePassageRead,
    TicketAIPreviewRequest,
    TicketAIPreviewResponse,
    TicketCreateRequest,
    TicketDetailResponse,
    TicketMarkReadResponse,
    TicketMessageCreateRequest,
    TicketMessageCreateResponse,
    TicketMessageRead,
    TicketPatchRequest,
    TicketProcessRequest,
    TicketProcessResponse,
    TicketRead,
)
from helpdesk.services import job_service, notification_service, org_service, ticketing_service
from helpdesk.services import ticket_pipeline_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/tickets",
    tags=["Tickets"],
    dependencies=[Depends(require_internal_secret)],
)

ESCALATED_PRIORITIES = {TicketPriority.HIGH.value, TicketPriority.URGENT.value}


def _enqueue_message_processing(
    db: Session,
    background_tasks: BackgroundTasks,
    ticket: Ticket,
    message_id: UUID,
) -> tuple[Job, bool]:
    job, created = job_service.schedule_ticket_message_job(
        db, org_id=ticket.organization_id, ticket_id=ticket.id, message_id=message_id
    )
    if created and settings.AI_PIPELINE_INLINE:
        background_tasks.add_task(run_job_now, job.id)
    logger.info(
        "AI processing %s",
        "queued" if created else "already queued",
        extra=build_log_context(
            org_id=ticket.organization_id,
            ticket_id=ticket.id,
            message_id=message_id,
            job_id=job.id,
        ),
    )
    return job, created


@router.post("", response_model=TicketRead, status_code=status.HTTP_201_CREATED)
def create_ticket(
    data: TicketCreateRequest,
    db: Session = Depends(get_db),
) -> TicketRead:
    """Open a ticket in the `open` state."""
    if not org_service.get_org_by_id(db, data.organization_id):
        raise HTTPException(status_code=404, detail="Organization not found")
    ticket = ticketing_service.create_ticket(
        db,
        org_id=data.organization_id,
        title=data.title,
        description=data.description,
        created_by_user_id=data.created_by_user_id,
        priority=data.priority,
        assigned_to_user_id=data.assigned_to_user_id,
        assigned_to_team_id=data.assigned_to_team_id,
    )
    notification_service.notify_ticket_created(db, ticket.organization_id, ticket.id, ticket.title)
    return TicketRead.model_validate(ticket)


@router.get("/{ticket_id}", response_model=TicketDetailResponse)
def get_ticket(
    ticket_id: UUID,
    db: Session = Depends(get_db),
) -> TicketDetailResponse:
    """Ticket with its full message timeline."""
    ticket = ticketing_service.get_ticket(db, ticket_id)
    if not ticket:
        raise HTTPException(status_code=404, detail="Ticket not found")
    messages = ticketing_service.list_messages(db, ticket_id)
    return TicketDetailResponse(
        **TicketRead.model_validate(ticket).model_dump(),
        messages=[TicketMessageRead.model_validate(m) for m in messages],
    )


@router.patch("/{ticket_id}", response_model=TicketRead)
def patch_ticket(
    ticket_id: UUID,
    data: TicketPatchRequest,
    db: Session = Depends(get_db),
) -> TicketRead:
    """Update status/priority/assignment if the ticket is still at expected_version."""
    changes = data.model_dump(exclude_unset=True, exclude={"expected_version"})
    for field in ("status", "priority"):
        if field in changes and changes[field] is None:
            del changes[field]
    if not changes:
        raise HTTPException(status_code=400, detail="No changes supplied")

    try:
        ticket = ticketing_service.update_ticket(db, ticket_id, data.expected_version, changes)
    except TicketNotFoundError:
        raise HTTPException(status_code=404, detail="Ticket not found")
    except TicketVersionConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))

    escalated = "priority" in changes and ticket.priority in ESCALATED_PRIORITIES
    notification_service.notify_ticket_updated(
        db,
        ticket.organization_id,
        ticket.id,
        {key: str(getattr(ticket, key)) for key in changes},
        escalated=escalated,
    )
    return TicketRead.model_validate(ticket)


@router.post(
    "/{ticket_id}/messages",
    response_model=TicketMessageCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_message(
    ticket_id: UUID,
    data: TicketMessageCreateRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
) -> TicketMessageCreateResponse:
    """
    Append a message to a ticket.

    Public customer messages are queued for AI processing when the
    organization has AI enabled.
    """
    ticket = ticketing_service.get_ticket(db, ticket_id)
    if not ticket:
        raise HTTPException(status_code=404, detail="Ticket not found")

    message = ticketing_service.create_message(
        db,
        ticket,
        content=data.content,
        sender_user_id=data.sender_user_id,
        is_internal_note=data.is_internal_note,
        attached_file_ids=data.attached_file_ids,
    )

    job_id = None
    org = org_service.get_org_by_id(db, ticket.organization_id)
    if org and org.ai_enabled and ticketing_service.is_customer_message(db, message):
        job, _ = _enqueue_message_processing(db, background_tasks, ticket, message.id)
        job_id = job.id

    return TicketMessageCreateResponse(
        message=TicketMessageRead.model_validate(message),
        job_id=job_id,
    )


@router.post("/{ticket_id}/read", response_model=TicketMarkReadResponse)
def mark_ticket_read(
    ticket_id: UUID,
    audience: UserRole = Query(..., description="customer, or agent/admin for staff"),
    db: Session = Depends(get_db),
) -> TicketMarkReadResponse:
    """Mark every message on the ticket as read for one side of the conversation."""
    if not ticketing_service.get_ticket(db, ticket_id):
        raise HTTPException(status_code=404, detail="Ticket not found")
    updated = ticketing_service.mark_messages_read(db, ticket_id, audience=audience)
    return TicketMarkReadResponse(audience=audience, updated=updated)


@router.post(
    "/process",
    response_model=TicketProcessResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def process_message(
    data: TicketProcessRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
) -> TicketProcessResponse:
    """
    Trigger the AI pipeline for one customer message.

    Returns immediately. A repeated trigger for the same message returns the
    existing job instead of starting another run.
    """
    try:
        ticket = ticketing_service.require_ticket(db, data.ticket_id)
        ticketing_service.require_ticket_message(db, data.ticket_id, data.message_id)
    except (TicketNotFoundError, MessageNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))

    job, created = _enqueue_message_processing(db, background_tasks, ticket, data.message_id)
    return TicketProcessResponse(job_id=job.id, status=job.status, deduplicated=not created)


@router.post("/{ticket_id}/ai-preview", response_model=TicketAIPreviewResponse)
async def preview_ai_reply(
    ticket_id: UUID,
    data: TicketAIPreviewRequest,
    db: Session = Depends(get_db),
) -> TicketAIPreviewResponse:
    """Draft an AI reply for arbitrary text. Nothing is persisted."""
    try:
        result, passages = await ticket_pipeline_service.preview_reply(db, ticket_id, data.message)
    except TicketNotFoundError:
        raise HTTPException(status_code=404, detail="Ticket not found")
    except (KnowledgeSearchError, AIResponseError) as e:
        raise HTTPException(status_code=502, detail=str(e))

    return TicketAIPreviewResponse(
        **result.model_dump(),
        knowledge_base=[KnowledgePassageRead(**p.to_dict()) for p in passages],
    )
