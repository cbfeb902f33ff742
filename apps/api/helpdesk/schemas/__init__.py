"""Pydantic schemas for API request/response models."""

from helpdesk.schemas.job import JobListItem, JobRead
from helpdesk.schemas.knowledge import (
    KnowledgeSourceCreate,
    KnowledgeSourceDeleted,
    KnowledgeSourceQueued,
)
from helpdesk.schemas.notification import NotificationListResponse, NotificationRead
from helpdesk.schemas.ticketing import (
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

__all__ = [
    # Jobs
    "JobRead",
    "JobListItem",
    # Knowledge
    "KnowledgeSourceCreate",
    "KnowledgeSourceQueued",
    "KnowledgeSourceDeleted",
    # Notifications
    "NotificationRead",
    "NotificationListResponse",
    # Tickets
    "TicketCreateRequest",
    "TicketPatchRequest",
    "TicketMessageCreateRequest",
    "TicketMessageCreateResponse",
    "TicketMessageRead",
    "TicketRead",
    "TicketDetailResponse",
    "TicketMarkReadResponse",
    "TicketProcessRequest",
    "TicketProcessResponse",
    "TicketAIPreviewRequest",
    "TicketAIPreviewResponse",
]
