"""SQLAlchemy ORM models."""

from helpdesk.db.models.jobs import Job
from helpdesk.db.models.knowledge import KnowledgeBaseEmbedding
from helpdesk.db.models.notifications import Notification
from helpdesk.db.models.organizations import Organization, SupportTeam, UserProfile
from helpdesk.db.models.ticketing import Ticket, TicketMessage

__all__ = [
    "Job",
    "KnowledgeBaseEmbedding",
    "Notification",
    "Organization",
    "SupportTeam",
    "Ticket",
    "TicketMessage",
    "UserProfile",
]
