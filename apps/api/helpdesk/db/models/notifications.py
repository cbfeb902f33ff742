"""Notification ORM model."""

from __future__ import annotations

from typing import TYPE_CHECKING

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from helpdesk.db.base import Base

if TYPE_CHECKING:
    from helpdesk.db.models import Organization


class Notification(Base):
    """
    Organization-scoped staff notification.

    Raised by the AI pipeline for flagged content, human review requests and
    processing errors.
    """

    __tablename__ = "notifications"
    __table_args__ = (
        Index("idx_notif_org_created", "organization_id", "created_at"),
        Index("idx_notif_entity", "entity_type", "entity_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )

    # Notification type (enum)
    notification_type: Mapped[str] = mapped_column(String(50), nullable=False)

    # Entity reference (for click-through)
    entity_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    entity_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    # Content
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Read status
    read_at: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    organization: Mapped["Organization"] = relationship()
