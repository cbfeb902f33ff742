"""Ticket and message enums."""

from enum import Enum


class TicketStatus(str, Enum):
    """Ticket lifecycle status."""

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    WAITING_ON_CUSTOMER = "waiting_on_customer"
    RESOLVED = "resolved"
    CLOSED = "closed"
    UNDER_REVIEW = "under_review"
    ERROR = "error"


class TicketPriority(str, Enum):
    """Ticket priority level."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class NextAction(str, Enum):
    """Workflow step suggested by the response generator."""

    CLOSE = "close"
    WAIT_FOR_CUSTOMER = "wait_for_customer"
    ESCALATE = "escalate"
    FOLLOW_UP = "follow_up"
    NONE = "none"
