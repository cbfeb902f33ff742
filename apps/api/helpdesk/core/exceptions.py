"""Domain exceptions shared by services, jobs and routers."""

from uuid import UUID


class HelpdeskError(Exception):
    """Base class for helpdesk domain errors."""


class TicketNotFoundError(HelpdeskError):
    def __init__(self, ticket_id: UUID):
        super().__init__(f"Ticket {ticket_id} not found")
        self.ticket_id = ticket_id


class MessageNotFoundError(HelpdeskError):
    def __init__(self, message_id: UUID, ticket_id: UUID | None = None):
        if ticket_id:
            detail = f"Message {message_id} not found on ticket {ticket_id}"
        else:
            detail = f"Message {message_id} not found"
        super().__init__(detail)
        self.message_id = message_id
        self.ticket_id = ticket_id


class ScreenerUnavailableError(HelpdeskError):
    """The moderation call failed; the message could not be screened."""


class KnowledgeSearchError(HelpdeskError):
    """The similarity search against the knowledge index failed."""


class AIResponseError(HelpdeskError):
    """The generation call failed or returned output outside the contract."""


class TicketVersionConflictError(HelpdeskError):
    """A conditional ticket update found a newer revision than expected."""

    def __init__(self, ticket_id: UUID, expected_version: int):
        super().__init__(
            f"Ticket {ticket_id} changed since version {expected_version}"
        )
        self.ticket_id = ticket_id
        self.expected_version = expected_version


class PipelineRunError(HelpdeskError):
    """A ticket pipeline run ended in the failed outcome (already notified)."""

    def __init__(self, error: str, result: dict):
        super().__init__(error)
        self.result = result
