"""
Notification Service - staff-facing, organization-scoped notifications.

Provides CRUD plus the three notifications the AI ticket pipeline raises.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from helpdesk.db.enums import NotificationEntityType, NotificationType
from helpdesk.db.models import Notification


HUMAN_REVIEW_FALLBACK = "AI requested human review"


# =============================================================================
# Notification CRUD
# =============================================================================


def create_notification(
    db: Session,
    org_id: UUID,
    type: NotificationType,
    title: str,
    content: Optional[str] = None,
    entity_type: Optional[NotificationEntityType] = None,
    entity_id: Optional[UUID] = None,
    commit: bool = True,
) -> Notification:
    """Create a notification for an organization's staff."""
    notification = Notification(
        organization_id=org_id,
        notification_type=type.value,
        title=title,
        content=content,
        entity_type=entity_type.value if entity_type else None,
        entity_id=entity_id,
    )
    db.add(notification)
    if commit:
        db.commit()
        db.refresh(notification)
    else:
        db.flush()
    return notification


def list_notifications(
    db: Session,
    org_id: UUID,
    unread_only: bool = False,
    entity_id: UUID | None = None,
    limit: int = 50,
) -> list[Notification]:
    """List an organization's notifications, newest first."""
    query = db.query(Notification).filter(Notification.organization_id == org_id)
    if unread_only:
        query = query.filter(Notification.read_at.is_(None))
    if entity_id:
        query = query.filter(Notification.entity_id == entity_id)
    return query.order_by(Notification.created_at.desc()).limit(limit).all()


def count_unread(db: Session, org_id: UUID) -> int:
    return (
        db.query(Notification)
        .filter(Notification.organization_id == org_id, Notification.read_at.is_(None))
        .count()
    )


def mark_read(db: Session, notification_id: UUID, org_id: UUID) -> Notification | None:
    """Mark a notification read. Returns None if it does not exist in the org."""
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.organization_id == org_id,
    ).first()
    if not notification:
        return None
    if notification.read_at is None:
        notification.read_at = datetime.now(timezone.utc)
        db.commit()
        db.refresh(notification)
    return notification


# =============================================================================
# Pipeline triggers
# =============================================================================


def notify_content_flagged(
    db: Session, org_id: UUID, message_id: UUID, flag_reason: str | None
) -> Notification:
    """Flagged customer message: high priority, links to the message."""
    return create_notification(
        db,
        org_id=org_id,
        type=NotificationType.HIGH_PRIORITY,
        title="Content Flagged",
        content=f"Message content was flagged: {flag_reason}",
        entity_type=NotificationEntityType.TICKET_MESSAGE,
        entity_id=message_id,
    )


def notify_human_review(
    db: Session, org_id: UUID, ticket_id: UUID, reason: str | None
) -> Notification:
    """AI reply sent but a human should look at the ticket."""
    return create_notification(
        db,
        org_id=org_id,
        type=NotificationType.HUMAN_REVIEW_REQUIRED,
        title="Human Review Required",
        content=reason or HUMAN_REVIEW_FALLBACK,
        entity_type=NotificationEntityType.TICKET,
        entity_id=ticket_id,
    )


def notify_processing_error(
    db: Session, org_id: UUID, ticket_id: UUID, error: str
) -> Notification:
    """The pipeline run for a ticket failed."""
    return create_notification(
        db,
        org_id=org_id,
        type=NotificationType.PROCESSING_ERROR,
        title="AI Processing Error",
        content=f"Error processing ticket: {error}",
        entity_type=NotificationEntityType.TICKET,
        entity_id=ticket_id,
    )


# =============================================================================
# Ticket lifecycle
# =============================================================================


def notify_ticket_created(db: Session, org_id: UUID, ticket_id: UUID, title: str) -> Notification:
    return create_notification(
        db,
        org_id=org_id,
        type=NotificationType.TICKET_CREATED,
        title="New Ticket",
        content=title,
        entity_type=NotificationEntityType.TICKET,
        entity_id=ticket_id,
    )


def notify_ticket_updated(
    db: Session, org_id: UUID, ticket_id: UUID, changes: dict[str, str], escalated: bool = False
) -> Notification:
    """Direct staff edit; escalations (priority raised to high/urgent) get their own type."""
    summary = ", ".join(f"{field}={value}" for field, value in sorted(changes.items()))
    return create_notification(
        db,
        org_id=org_id,
        type=NotificationType.TICKET_ESCALATED if escalated else NotificationType.TICKET_UPDATED,
        title="Ticket Escalated" if escalated else "Ticket Updated",
        content=summary or None,
        entity_type=NotificationEntityType.TICKET,
        entity_id=ticket_id,
    )
