"""
Ticket State Updater - persists the AI reply and applies next_action.

The reply is always committed first. The next_action table is then
applied as-is with a conditional UPDATE on the version read at the start
of the run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from helpdesk.core.exceptions import TicketVersionConflictError
from helpdesk.core.structured_logging import build_log_context
from helpdesk.db.enums import NextAction, TicketPriority, TicketStatus
from helpdesk.db.models import Ticket, TicketMessage
from helpdesk.services import notification_service, ticketing_service
from helpdesk.services.ai_prompt_schemas import AgentResult

logger = logging.getLogger(__name__)


NEXT_ACTION_UPDATES: dict[NextAction, dict[str, Any]] = {
    NextAction.CLOSE: {"status": TicketStatus.RESOLVED},
    NextAction.WAIT_FOR_CUSTOMER: {"status": TicketStatus.WAITING_ON_CUSTOMER},
    NextAction.ESCALATE: {"priority": TicketPriority.HIGH},
    NextAction.FOLLOW_UP: {"status": TicketStatus.IN_PROGRESS},
    NextAction.NONE: {},
}


class Transition:
    APPLIED = "applied"
    NOOP = "noop"
    CONFLICT = "conflict"


@dataclass
class StateUpdate:
    reply_message_id: UUID
    transition: str
    changes: dict[str, str] = field(default_factory=dict)
    human_review_notification_id: UUID | None = None


def plan_changes(ticket_status: str, ticket_priority: str, next_action: NextAction) -> dict[str, str]:
    """
    Resolve next_action into the column changes to apply.

    Every target in the table is applied regardless of where the ticket
    currently sits; only columns already holding the target are dropped.
    """
    current = {"status": ticket_status, "priority": ticket_priority}
    return {
        column: target.value
        for column, target in NEXT_ACTION_UPDATES.get(next_action, {}).items()
        if current[column] != target.value
    }


def create_ai_reply(db: Session, ticket: Ticket, content: str) -> TicketMessage:
    """Insert the generated reply: visible to the customer, unread by agents."""
    return ticketing_service.create_message(
        db,
        ticket,
        content=content,
        sender_user_id=None,
        is_internal_note=False,
        is_ai_generated=True,
        agent_has_read=False,
        customer_has_read=True,
        attached_file_ids=[],
    )


class TicketStateUpdater:
    """Apply an AgentResult to a ticket."""

    def __init__(self, db: Session):
        self.db = db

    def apply(self, ticket: Ticket, result: AgentResult, expected_version: int) -> StateUpdate:
        """
        Persist the reply, raise the review notification and move the ticket.

        `expected_version` is the version read at run start; a ticket that
        has moved on since then keeps its state and the reply still lands.
        """
        ticket_id = ticket.id
        org_id = ticket.organization_id
        status = ticket.status
        priority = ticket.priority

        reply = create_ai_reply(self.db, ticket, result.response)
        update = StateUpdate(reply_message_id=reply.id, transition=Transition.NOOP)

        if result.needs_human_review:
            notification = notification_service.notify_human_review(
                self.db, org_id, ticket_id, result.human_review_reason
            )
            update.human_review_notification_id = notification.id

        changes = plan_changes(status, priority, result.next_action)
        if not changes:
            return update

        try:
            ticketing_service.update_ticket(self.db, ticket_id, expected_version, changes)
        except TicketVersionConflictError:
            logger.warning(
                "Ticket changed during AI run; skipping %s",
                result.next_action.value,
                extra=build_log_context(org_id=org_id, ticket_id=ticket_id),
            )
            update.transition = Transition.CONFLICT
            return update

        update.transition = Transition.APPLIED
        update.changes = changes
        logger.info(
            "Applied next_action=%s to ticket",
            result.next_action.value,
            extra=build_log_context(org_id=org_id, ticket_id=ticket_id),
        )
        return update
