"""
Notifications Router - staff notifications per organization.

Provides notification listing and read status.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from helpdesk.core.deps import get_db, require_internal_secret
from helpdesk.schemas.notification import NotificationListResponse, NotificationRead
from helpdesk.services import notification_service


router = APIRouter(
    prefix="/notifications",
    tags=["Notifications"],
    dependencies=[Depends(require_internal_secret)],
)


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    organization_id: UUID,
    unread_only: bool = Query(False),
    entity_id: UUID | None = None,
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """List an organization's notifications, newest first."""
    items = notification_service.list_notifications(
        db,
        org_id=organization_id,
        unread_only=unread_only,
        entity_id=entity_id,
        limit=limit,
    )
    unread = notification_service.count_unread(db, organization_id)
    return NotificationListResponse(
        items=[NotificationRead.model_validate(n) for n in items],
        unread_count=unread,
    )


@router.post("/{notification_id}/read", response_model=NotificationRead)
def mark_notification_read(
    notification_id: UUID,
    organization_id: UUID,
    db: Session = Depends(get_db),
):
    """Mark a single notification as read."""
    notification = notification_service.mark_read(db, notification_id, organization_id)
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification
