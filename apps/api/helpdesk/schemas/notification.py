"""Pydantic schemas for staff notifications."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class NotificationRead(BaseModel):
    """Notification response."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    notification_type: str
    title: str
    content: str | None
    entity_type: str | None
    entity_id: UUID | None
    read_at: datetime | None
    created_at: datetime


class NotificationListResponse(BaseModel):
    items: list[NotificationRead]
    unread_count: int
