"""Ticket and ticket message ORM models."""

from __future__ import annotations

from typing import TYPE_CHECKING

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from helpdesk.db.base import Base, JSONType
from helpdesk.db.enums import DEFAULT_TICKET_PRIORITY, DEFAULT_TICKET_STATUS

if TYPE_CHECKING:
    from helpdesk.db.models import Organization, SupportTeam, UserProfile


class Ticket(Base):
    """
    Customer support request tracked through a status lifecycle.

    `version` is a revision counter bumped on every status/priority/assignment
    write; writers use it as a conditional-update predicate.
    """

    __tablename__ = "support_tickets"
    __table_args__ = (
        Index("idx_support_tickets_org_status", "organization_id", "status"),
        Index("idx_support_tickets_org_created", "organization_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(30), default=DEFAULT_TICKET_STATUS.value, nullable=False
    )
    priority: Mapped[str] = mapped_column(
        String(20), default=DEFAULT_TICKET_PRIORITY.value, nullable=False
    )
    created_by_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("user_profiles.id", ondelete="SET NULL"), nullable=True
    )
    assigned_to_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("user_profiles.id", ondelete="SET NULL"), nullable=True
    )
    assigned_to_team_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("support_teams.id", ondelete="SET NULL"), nullable=True
    )
    version: Mapped[int] = mapped_column(
        Integer, default=1, server_default=text("1"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    organization: Mapped["Organization"] = relationship()
    created_by: Mapped["UserProfile | None"] = relationship(foreign_keys=[created_by_user_id])
    assigned_to: Mapped["UserProfile | None"] = relationship(foreign_keys=[assigned_to_user_id])
    assigned_team: Mapped["SupportTeam | None"] = relationship()
    messages: Mapped[list["TicketMessage"]] = relationship(
        back_populates="ticket", order_by="TicketMessage.created_at"
    )


class TicketMessage(Base):
    """
    One message on a ticket timeline.

    sender_user_id is NULL for system/AI-authored messages. Content is
    immutable; only the read flags change after insert.
    """

    __tablename__ = "ticket_messages"
    __table_args__ = (
        Index("idx_ticket_messages_ticket_created", "ticket_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    ticket_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("support_tickets.id", ondelete="CASCADE"), nullable=False
    )
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    sender_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("user_profiles.id", ondelete="SET NULL"), nullable=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_internal_note: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), nullable=False
    )
    is_ai_generated: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), nullable=False
    )
    agent_has_read: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), nullable=False
    )
    customer_has_read: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), nullable=False
    )
    attached_file_ids: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    ticket: Mapped["Ticket"] = relationship(back_populates="messages")
    sender: Mapped["UserProfile | None"] = relationship()
