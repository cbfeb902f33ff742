"""Pydantic schemas for ticket intake and AI processing APIs."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from helpdesk.db.enums import NextAction, TicketPriority, TicketStatus, UserRole


class TicketCreateRequest(BaseModel):
    """Open a new ticket."""

    organization_id: UUID
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    created_by_user_id: UUID | None = None
    priority: TicketPriority = TicketPriority.NORMAL
    assigned_to_user_id: UUID | None = None
    assigned_to_team_id: UUID | None = None


class TicketPatchRequest(BaseModel):
    """Direct status/priority/assignment change, guarded by the ticket version."""

    expected_version: int = Field(ge=1)
    status: TicketStatus | None = None
    priority: TicketPriority | None = None
    assigned_to_user_id: UUID | None = None
    assigned_to_team_id: UUID | None = None


class TicketMessageCreateRequest(BaseModel):
    content: str = Field(min_length=1)
    sender_user_id: UUID | None = None
    is_internal_note: bool = False
    attached_file_ids: list[str] = Field(default_factory=list)


class TicketMessageRead(BaseModel):
    """Message timeline item for a ticket."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    ticket_id: UUID
    organization_id: UUID
    sender_user_id: UUID | None = None
    content: str
    is_internal_note: bool
    is_ai_generated: bool
    agent_has_read: bool
    customer_has_read: bool
    attached_file_ids: list[str] = Field(default_factory=list)
    created_at: datetime


class TicketRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    title: str
    description: str | None = None
    status: str
    priority: str
    created_by_user_id: UUID | None = None
    assigned_to_user_id: UUID | None = None
    assigned_to_team_id: UUID | None = None
    version: int
    created_at: datetime
    updated_at: datetime


class TicketDetailResponse(TicketRead):
    messages: list[TicketMessageRead] = Field(default_factory=list)


class TicketMessageCreateResponse(BaseModel):
    message: TicketMessageRead
    job_id: UUID | None = None


class TicketProcessRequest(BaseModel):
    """Pipeline trigger: one inbound customer message."""

    model_config = ConfigDict(populate_by_name=True)

    ticket_id: UUID = Field(alias="ticketId")
    message_id: UUID = Field(alias="messageId")


class TicketProcessResponse(BaseModel):
    job_id: UUID
    status: str
    deduplicated: bool


class TicketMarkReadResponse(BaseModel):
    audience: UserRole
    updated: int


class KnowledgePassageRead(BaseModel):
    source_type: str
    source_id: str
    content: str
    metadata: dict = Field(default_factory=dict)
    similarity: float


class TicketAIPreviewRequest(BaseModel):
    message: str = Field(min_length=1)


class TicketAIPreviewResponse(BaseModel):
    response: str
    needs_human_review: bool
    human_review_reason: str | None = None
    confidence_score: float
    next_action: NextAction
    suggested_knowledge_articles: list[str] = Field(default_factory=list)
    knowledge_base: list[KnowledgePassageRead] = Field(default_factory=list)
