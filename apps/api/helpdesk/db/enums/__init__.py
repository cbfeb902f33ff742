"""Enum definitions for application constants."""

from helpdesk.db.enums.auth import UserRole
from helpdesk.db.enums.defaults import (
    DEFAULT_JOB_STATUS,
    DEFAULT_TICKET_PRIORITY,
    DEFAULT_TICKET_STATUS,
)
from helpdesk.db.enums.jobs import JobStatus, JobType
from helpdesk.db.enums.knowledge import KnowledgeSourceType
from helpdesk.db.enums.notifications import NotificationEntityType, NotificationType
from helpdesk.db.enums.ticketing import NextAction, TicketPriority, TicketStatus

__all__ = [
    "DEFAULT_JOB_STATUS",
    "DEFAULT_TICKET_PRIORITY",
    "DEFAULT_TICKET_STATUS",
    "JobStatus",
    "JobType",
    "KnowledgeSourceType",
    "NextAction",
    "NotificationEntityType",
    "NotificationType",
    "TicketPriority",
    "TicketStatus",
    "UserRole",
]
