"""Ticket and message persistence: intake, lookups and versioned updates."""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload

from helpdesk.core.exceptions import (
    MessageNotFoundError,
    TicketNotFoundError,
    TicketVersionConflictError,
)
from helpdesk.db.enums import TicketPriority, TicketStatus, UserRole
from helpdesk.db.models import Ticket, TicketMessage, UserProfile
from helpdesk.services.response_generator import TicketContext

logger = logging.getLogger(__name__)

UPDATABLE_TICKET_FIELDS = frozenset(
    {"status", "priority", "assigned_to_user_id", "assigned_to_team_id"}
)


# =============================================================================
# Tickets
# =============================================================================


def create_ticket(
    db: Session,
    org_id: UUID,
    title: str,
    description: str | None = None,
    created_by_user_id: UUID | None = None,
    priority: TicketPriority = TicketPriority.NORMAL,
    assigned_to_user_id: UUID | None = None,
    assigned_to_team_id: UUID | None = None,
) -> Ticket:
    """Create a ticket in the `open` state."""
    ticket = Ticket(
        organization_id=org_id,
        title=title,
        description=description,
        status=TicketStatus.OPEN.value,
        priority=priority.value,
        created_by_user_id=created_by_user_id,
        assigned_to_user_id=assigned_to_user_id,
        assigned_to_team_id=assigned_to_team_id,
        version=1,
    )
    db.add(ticket)
    db.commit()
    db.refresh(ticket)
    return ticket


def get_ticket(db: Session, ticket_id: UUID, org_id: UUID | None = None) -> Ticket | None:
    """Get a ticket with its people/team loaded, optionally scoped to org."""
    query = (
        db.query(Ticket)
        .options(
            joinedload(Ticket.created_by),
            joinedload(Ticket.assigned_to),
            joinedload(Ticket.assigned_team),
        )
        .filter(Ticket.id == ticket_id)
    )
    if org_id:
        query = query.filter(Ticket.organization_id == org_id)
    return query.first()


def require_ticket(db: Session, ticket_id: UUID, org_id: UUID | None = None) -> Ticket:
    ticket = get_ticket(db, ticket_id, org_id=org_id)
    if not ticket:
        raise TicketNotFoundError(ticket_id)
    return ticket


def build_ticket_context(ticket: Ticket) -> TicketContext:
    """Snapshot the ticket fields the response generator sees."""
    return TicketContext(
        status=ticket.status,
        priority=ticket.priority,
        created_at=ticket.created_at,
        updated_at=ticket.updated_at,
        created_by=ticket.created_by.display_name if ticket.created_by else None,
        assigned_to=ticket.assigned_to.display_name if ticket.assigned_to else None,
        assigned_team=ticket.assigned_team.name if ticket.assigned_team else None,
    )


def update_ticket(
    db: Session,
    ticket_id: UUID,
    expected_version: int,
    changes: dict[str, Any],
) -> Ticket:
    """
    Apply `changes` only if the ticket is still at `expected_version`.

    Bumps the version on success. Raises TicketVersionConflictError when
    another writer got there first and TicketNotFoundError when the ticket
    is gone.
    """
    unknown = set(changes) - UPDATABLE_TICKET_FIELDS
    if unknown:
        raise ValueError(f"Unsupported ticket fields: {sorted(unknown)}")

    values = {
        key: value.value if isinstance(value, (TicketStatus, TicketPriority)) else value
        for key, value in changes.items()
    }
    result = db.execute(
        update(Ticket)
        .where(Ticket.id == ticket_id, Ticket.version == expected_version)
        .values(**values, version=Ticket.version + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        if not db.get(Ticket, ticket_id):
            raise TicketNotFoundError(ticket_id)
        raise TicketVersionConflictError(ticket_id, expected_version)

    db.commit()
    ticket = db.get(Ticket, ticket_id)
    db.refresh(ticket)
    return ticket


# =============================================================================
# Messages
# =============================================================================


def create_message(
    db: Session,
    ticket: Ticket,
    content: str,
    sender_user_id: UUID | None = None,
    is_internal_note: bool = False,
    is_ai_generated: bool = False,
    agent_has_read: bool = False,
    customer_has_read: bool = False,
    attached_file_ids: list[str] | None = None,
) -> TicketMessage:
    """Append a message to a ticket; the organization comes from the ticket."""
    message = TicketMessage(
        ticket_id=ticket.id,
        organization_id=ticket.organization_id,
        sender_user_id=sender_user_id,
        content=content,
        is_internal_note=is_internal_note,
        is_ai_generated=is_ai_generated,
        agent_has_read=agent_has_read,
        customer_has_read=customer_has_read,
        attached_file_ids=list(attached_file_ids or []),
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


def get_message(db: Session, message_id: UUID) -> TicketMessage | None:
    return db.query(TicketMessage).filter(TicketMessage.id == message_id).first()


def require_ticket_message(db: Session, ticket_id: UUID, message_id: UUID) -> TicketMessage:
    """Load a message and check it belongs to the given ticket."""
    message = get_message(db, message_id)
    if not message or message.ticket_id != ticket_id:
        raise MessageNotFoundError(message_id, ticket_id)
    return message


def list_messages(db: Session, ticket_id: UUID) -> list[TicketMessage]:
    return (
        db.query(TicketMessage)
        .filter(TicketMessage.ticket_id == ticket_id)
        .order_by(TicketMessage.created_at, TicketMessage.id)
        .all()
    )


def is_customer_message(db: Session, message: TicketMessage) -> bool:
    """True for public messages written by a customer (the pipeline's input)."""
    if message.is_internal_note or message.is_ai_generated or not message.sender_user_id:
        return False
    sender = db.get(UserProfile, message.sender_user_id)
    return bool(sender and sender.role == UserRole.CUSTOMER.value)


def mark_messages_read(db: Session, ticket_id: UUID, *, audience: UserRole) -> int:
    """Flip the read flag for one audience on every message of a ticket."""
    column = (
        TicketMessage.customer_has_read
        if audience == UserRole.CUSTOMER
        else TicketMessage.agent_has_read
    )
    result = db.execute(
        update(TicketMessage)
        .where(TicketMessage.ticket_id == ticket_id, column.is_(False))
        .values({column.key: True})
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return result.rowcount
