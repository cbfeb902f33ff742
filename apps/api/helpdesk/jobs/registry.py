"""Job handler registry."""

from __future__ import annotations

from typing import Awaitable, Callable, Mapping

from helpdesk.db.enums import JobType
from helpdesk.jobs.handlers import knowledge, ticketing

JobHandler = Callable[[object, object], Awaitable[dict | None]]

JOB_HANDLERS: Mapping[str, JobHandler] = {
    JobType.TICKET_MESSAGE_PROCESS.value: ticketing.process_ticket_message,
    JobType.KNOWLEDGE_INDEX.value: knowledge.process_knowledge_index,
}


def resolve_job_handler(job_type: str) -> JobHandler:
    handler = JOB_HANDLERS.get(job_type)
    if not handler:
        raise ValueError(f"Unknown job type: {job_type}")
    return handler
