"""Notification-related enums."""

from enum import Enum


class NotificationType(str, Enum):
    """Types of staff-facing notifications."""

    # AI pipeline
    HIGH_PRIORITY = "high_priority"  # Flagged customer content
    HUMAN_REVIEW_REQUIRED = "human_review_required"
    PROCESSING_ERROR = "processing_error"

    # Ticket lifecycle
    TICKET_CREATED = "ticket_created"
    TICKET_UPDATED = "ticket_updated"
    TICKET_ESCALATED = "ticket_escalated"


class NotificationEntityType(str, Enum):
    """Entity a notification links to."""

    TICKET = "support_tickets"
    TICKET_MESSAGE = "ticket_messages"
