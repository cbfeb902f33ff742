"""Tests for structured logging helpers."""

import uuid

from helpdesk.core.structured_logging import build_log_context


def test_build_log_context_includes_only_provided_fields():
    ticket_id = uuid.uuid4()
    context = build_log_context(
        org_id="org-1",
        ticket_id=ticket_id,
        message_id="msg-1",
        job_id="job-1",
        request_id="req-1",
    )

    assert context == {
        "org_id": "org-1",
        "ticket_id": str(ticket_id),
        "message_id": "msg-1",
        "job_id": "job-1",
        "request_id": "req-1",
    }


def test_build_log_context_ignores_empty_fields():
    context = build_log_context(
        org_id="",
        ticket_id=None,
        request_id="req-1",
    )

    assert context == {"request_id": "req-1"}
