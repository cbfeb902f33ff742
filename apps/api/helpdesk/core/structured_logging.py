"""Structured logging helpers (content-safe)."""

from typing import Any
from uuid import UUID


def build_log_context(
    *,
    org_id: str | UUID | None = None,
    ticket_id: str | UUID | None = None,
    message_id: str | UUID | None = None,
    job_id: str | UUID | None = None,
    request_id: str | None = None,
) -> dict[str, Any]:
    """Return a log context dict holding identifiers only, never message text."""
    context: dict[str, Any] = {}
    if org_id:
        context["org_id"] = str(org_id)
    if ticket_id:
        context["ticket_id"] = str(ticket_id)
    if message_id:
        context["message_id"] = str(message_id)
    if job_id:
        context["job_id"] = str(job_id)
    if request_id:
        context["request_id"] = request_id
    return context
