"""Ticket message AI pipeline job handler."""

from __future__ import annotations

from uuid import UUID

from helpdesk.core.exceptions import PipelineRunError
from helpdesk.services import ticket_pipeline_service
from helpdesk.services.ticket_pipeline_service import PipelineOutcome


def _uuid_from_payload(payload: dict, key: str) -> UUID:
    value = payload.get(key)
    if not value:
        raise ValueError(f"Missing {key} in job payload")
    return UUID(str(value))


async def process_ticket_message(db, job) -> dict:
    """Screen, answer and route one inbound customer message."""
    payload = job.payload or {}
    ticket_id = _uuid_from_payload(payload, "ticket_id")
    message_id = _uuid_from_payload(payload, "message_id")

    pipeline = ticket_pipeline_service.build_pipeline(db)
    result = await pipeline.run(ticket_id, message_id)
    if result.outcome == PipelineOutcome.FAILED:
        raise PipelineRunError(result.error or "AI pipeline failed", result.to_dict())
    return result.to_dict()
