"""Centralized defaults for enums."""

from helpdesk.db.enums.jobs import JobStatus
from helpdesk.db.enums.ticketing import TicketPriority, TicketStatus


DEFAULT_JOB_STATUS: JobStatus = JobStatus.PENDING
DEFAULT_TICKET_STATUS: TicketStatus = TicketStatus.OPEN
DEFAULT_TICKET_PRIORITY: TicketPriority = TicketPriority.NORMAL
