"""API tests for ticket intake, updates and AI processing triggers."""

from __future__ import annotations

import uuid

import pytest
from httpx import AsyncClient

from ai_fakes import FakeProvider, agent_payload
from helpdesk.core.config import settings
from helpdesk.db.enums import JobStatus, NotificationType
from helpdesk.db.models import Job, Notification, Ticket, TicketMessage
from helpdesk.services import ticket_pipeline_service


@pytest.fixture
def inline_pipeline(monkeypatch):
    """Run queued jobs right after the request with a fake provider."""
    provider = FakeProvider()
    monkeypatch.setattr(settings, "AI_PIPELINE_INLINE", True)
    monkeypatch.setattr(ticket_pipeline_service, "get_configured_provider", lambda: provider)
    return provider


@pytest.mark.asyncio
async def test_create_ticket(client: AsyncClient, db, test_org, test_customer):
    response = await client.post(
        "/tickets",
        json={
            "organization_id": str(test_org.id),
            "title": "Cannot export invoices",
            "description": "The export button does nothing",
            "created_by_user_id": str(test_customer.id),
        },
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "open"
    assert data["priority"] == "normal"
    assert data["version"] == 1

    [notification] = db.query(Notification).all()
    assert notification.notification_type == NotificationType.TICKET_CREATED.value
    assert notification.content == "Cannot export invoices"
    assert str(notification.entity_id) == data["id"]


@pytest.mark.asyncio
async def test_create_ticket_unknown_org_returns_404(client: AsyncClient, db):
    response = await client.post(
        "/tickets", json={"organization_id": str(uuid.uuid4()), "title": "Lost"}
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_get_ticket_with_messages(client: AsyncClient, test_ticket, test_customer_message):
    response = await client.get(f"/tickets/{test_ticket.id}")

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Cannot log in"
    assert [m["id"] for m in data["messages"]] == [str(test_customer_message.id)]


@pytest.mark.asyncio
async def test_get_missing_ticket_returns_404(client: AsyncClient, db):
    response = await client.get(f"/tickets/{uuid.uuid4()}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_customer_message_queues_ai_job(client: AsyncClient, db, test_ticket, test_customer):
    response = await client.post(
        f"/tickets/{test_ticket.id}/messages",
        json={"content": "Any update?", "sender_user_id": str(test_customer.id)},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["job_id"] is not None
    job = db.get(Job, uuid.UUID(data["job_id"]))
    assert job.status == JobStatus.PENDING.value
    assert job.payload["message_id"] == data["message"]["id"]


@pytest.mark.asyncio
async def test_agent_message_does_not_queue_ai_job(client: AsyncClient, db, test_ticket, test_agent):
    response = await client.post(
        f"/tickets/{test_ticket.id}/messages",
        json={"content": "Checking now", "sender_user_id": str(test_agent.id)},
    )

    assert response.status_code == 201
    assert response.json()["job_id"] is None
    assert db.query(Job).count() == 0


@pytest.mark.asyncio
async def test_ai_disabled_org_does_not_queue_ai_job(
    client: AsyncClient, db, test_org, test_ticket, test_customer
):
    test_org.ai_enabled = False
    db.commit()

    response = await client.post(
        f"/tickets/{test_ticket.id}/messages",
        json={"content": "Hello?", "sender_user_id": str(test_customer.id)},
    )

    assert response.status_code == 201
    assert response.json()["job_id"] is None


@pytest.mark.asyncio
async def test_process_trigger_is_idempotent(
    client: AsyncClient, db, test_ticket, test_customer_message
):
    body = {"ticketId": str(test_ticket.id), "messageId": str(test_customer_message.id)}

    first = await client.post("/tickets/process", json=body)
    second = await client.post("/tickets/process", json=body)

    assert first.status_code == 202
    assert first.json()["deduplicated"] is False
    assert first.json()["status"] == "pending"
    assert second.status_code == 202
    assert second.json()["deduplicated"] is True
    assert second.json()["job_id"] == first.json()["job_id"]
    assert db.query(Job).count() == 1


@pytest.mark.asyncio
async def test_process_trigger_unknown_message_returns_404(client: AsyncClient, db, test_ticket):
    response = await client.post(
        "/tickets/process",
        json={"ticketId": str(test_ticket.id), "messageId": str(uuid.uuid4())},
    )

    assert response.status_code == 404
    assert db.query(Job).count() == 0
    assert db.query(Notification).count() == 0


@pytest.mark.asyncio
async def test_process_trigger_runs_inline(
    client: AsyncClient, db, test_ticket, test_customer_message, inline_pipeline
):
    inline_pipeline.reply = agent_payload(next_action="wait_for_customer")

    response = await client.post(
        "/tickets/process",
        json={"ticketId": str(test_ticket.id), "messageId": str(test_customer_message.id)},
    )

    assert response.status_code == 202
    db.expire_all()
    job = db.get(Job, uuid.UUID(response.json()["job_id"]))
    assert job.status == JobStatus.SUCCEEDED.value
    assert db.get(Ticket, test_ticket.id).status == "waiting_on_customer"
    assert (
        db.query(TicketMessage).filter(TicketMessage.is_ai_generated.is_(True)).count() == 1
    )

    again = await client.post(
        "/tickets/process",
        json={"ticketId": str(test_ticket.id), "messageId": str(test_customer_message.id)},
    )
    assert again.json()["deduplicated"] is True
    assert len(inline_pipeline.chat_calls) == 1


@pytest.mark.asyncio
async def test_patch_ticket_escalation(client: AsyncClient, db, test_ticket):
    response = await client.patch(
        f"/tickets/{test_ticket.id}",
        json={"expected_version": 1, "priority": "urgent"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["priority"] == "urgent"
    assert data["version"] == 2

    [notification] = db.query(Notification).all()
    assert notification.notification_type == NotificationType.TICKET_ESCALATED.value
    assert notification.content == "priority=urgent"


@pytest.mark.asyncio
async def test_patch_ticket_status(client: AsyncClient, db, test_ticket):
    response = await client.patch(
        f"/tickets/{test_ticket.id}",
        json={"expected_version": 1, "status": "in_progress"},
    )

    assert response.status_code == 200
    [notification] = db.query(Notification).all()
    assert notification.notification_type == NotificationType.TICKET_UPDATED.value
    assert notification.content == "status=in_progress"


@pytest.mark.asyncio
async def test_patch_ticket_stale_version_returns_409(client: AsyncClient, db, test_ticket):
    first = await client.patch(
        f"/tickets/{test_ticket.id}", json={"expected_version": 1, "status": "in_progress"}
    )
    stale = await client.patch(
        f"/tickets/{test_ticket.id}", json={"expected_version": 1, "status": "resolved"}
    )

    assert first.status_code == 200
    assert stale.status_code == 409


@pytest.mark.asyncio
async def test_patch_ticket_without_changes_returns_400(client: AsyncClient, test_ticket):
    response = await client.patch(f"/tickets/{test_ticket.id}", json={"expected_version": 1})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_ai_preview_persists_nothing(
    client: AsyncClient, db, test_ticket, monkeypatch
):
    provider = FakeProvider(reply=agent_payload(response="Try the reset link.", next_action="close"))
    monkeypatch.setattr(ticket_pipeline_service, "get_configured_provider", lambda: provider)

    response = await client.post(
        f"/tickets/{test_ticket.id}/ai-preview", json={"message": "Reset my password"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["response"] == "Try the reset link."
    assert data["next_action"] == "close"
    assert data["knowledge_base"] == []
    assert db.query(TicketMessage).count() == 0
    db.expire_all()
    assert db.get(Ticket, test_ticket.id).status == "open"


@pytest.mark.asyncio
async def test_ai_preview_generation_failure_returns_502(
    client: AsyncClient, db, test_ticket, monkeypatch
):
    provider = FakeProvider(reply="not json")
    monkeypatch.setattr(ticket_pipeline_service, "get_configured_provider", lambda: provider)

    response = await client.post(
        f"/tickets/{test_ticket.id}/ai-preview", json={"message": "Reset my password"}
    )

    assert response.status_code == 502


@pytest.mark.asyncio
async def test_mark_ticket_read_for_customer(client: AsyncClient, db, test_ticket, test_customer_message):
    response = await client.post(f"/tickets/{test_ticket.id}/read", params={"audience": "customer"})

    assert response.status_code == 200
    assert response.json() == {"audience": "customer", "updated": 1}
    db.expire_all()
    message = db.get(TicketMessage, test_customer_message.id)
    assert message.customer_has_read is True
    assert message.agent_has_read is False

    again = await client.post(f"/tickets/{test_ticket.id}/read", params={"audience": "customer"})
    assert again.json()["updated"] == 0


@pytest.mark.asyncio
async def test_mark_ticket_read_validates_input(client: AsyncClient, test_ticket):
    missing = await client.post(f"/tickets/{uuid.uuid4()}/read", params={"audience": "agent"})
    assert missing.status_code == 404

    bad_audience = await client.post(f"/tickets/{test_ticket.id}/read", params={"audience": "robot"})
    assert bad_audience.status_code == 422
