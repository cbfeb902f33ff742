"""
AI ticket pipeline - screen, retrieve, generate, update.

One run handles one inbound customer message. Stages are injected so the
chain can be exercised against deterministic fakes; `build_pipeline` wires
the configured implementations.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from helpdesk.core.config import settings
from helpdesk.core.structured_logging import build_log_context
from helpdesk.db.models import Ticket, TicketMessage
from helpdesk.services import notification_service, ticketing_service
from helpdesk.services.ai_prompt_schemas import AgentResult
from helpdesk.services.ai_provider import AIProvider, get_configured_provider
from helpdesk.services.content_screener import ContentScreener
from helpdesk.services.knowledge_index import get_knowledge_index
from helpdesk.services.knowledge_retriever import KnowledgeRetriever
from helpdesk.services.response_generator import GenerationRequest, ResponseGenerator
from helpdesk.services.ticket_state_service import TicketStateUpdater

logger = logging.getLogger(__name__)


class PipelineOutcome:
    FLAGGED = "flagged"
    REPLIED = "replied"
    FAILED = "failed"


@dataclass
class PipelineResult:
    outcome: str
    ticket_id: UUID
    message_id: UUID
    flag_reason: str | None = None
    agent_result: AgentResult | None = None
    reply_message_id: UUID | None = None
    transition: str | None = None
    changes: dict[str, str] | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "outcome": self.outcome,
            "ticket_id": str(self.ticket_id),
            "message_id": str(self.message_id),
        }
        if self.flag_reason:
            data["flag_reason"] = self.flag_reason
        if self.agent_result:
            data["agent_result"] = self.agent_result.model_dump(mode="json")
        if self.reply_message_id:
            data["reply_message_id"] = str(self.reply_message_id)
        if self.transition:
            data["transition"] = self.transition
        if self.changes:
            data["changes"] = dict(self.changes)
        if self.error:
            data["error"] = self.error
        return data


class TicketMessagePipeline:
    def __init__(
        self,
        db: Session,
        screener: ContentScreener,
        retriever: KnowledgeRetriever,
        generator: ResponseGenerator,
        updater: TicketStateUpdater,
        *,
        timeout: float | None = None,
    ):
        self.db = db
        self.screener = screener
        self.retriever = retriever
        self.generator = generator
        self.updater = updater
        self.timeout = timeout

    async def run(self, ticket_id: UUID, message_id: UUID) -> PipelineResult:
        """
        Process one customer message end to end.

        Missing or mismatched ticket/message raise before any side effect.
        Every later failure is caught here: the session is rolled back, a
        processing-error notification is raised for the ticket and the
        result comes back with outcome `failed`. Nothing is retried.
        """
        ticket = ticketing_service.require_ticket(self.db, ticket_id)
        message = ticketing_service.require_ticket_message(self.db, ticket_id, message_id)
        org_id = ticket.organization_id
        log_context = build_log_context(
            org_id=org_id, ticket_id=ticket_id, message_id=message_id
        )

        try:
            if self.timeout:
                return await asyncio.wait_for(
                    self._process(ticket, message), timeout=self.timeout
                )
            return await self._process(ticket, message)
        except asyncio.TimeoutError:
            error = f"Pipeline run timed out after {self.timeout:g}s"
        except Exception as exc:
            error = str(exc) or type(exc).__name__

        logger.error("AI pipeline run failed: %s", error, extra=log_context)
        self.db.rollback()
        try:
            notification_service.notify_processing_error(self.db, org_id, ticket_id, error)
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Could not record processing-error notification", extra=log_context)
        return PipelineResult(
            outcome=PipelineOutcome.FAILED,
            ticket_id=ticket_id,
            message_id=message_id,
            error=error,
        )

    async def _process(self, ticket: Ticket, message: TicketMessage) -> PipelineResult:
        ticket_id = ticket.id
        message_id = message.id
        org_id = ticket.organization_id
        expected_version = ticket.version
        log_context = build_log_context(
            org_id=org_id, ticket_id=ticket_id, message_id=message_id
        )

        screening = await self.screener.screen(
            message.content, attachments=list(message.attached_file_ids or [])
        )
        if screening.is_flagged:
            notification_service.notify_content_flagged(
                self.db, org_id, message_id, screening.flag_reason
            )
            logger.info("Message flagged; pipeline stopped", extra=log_context)
            return PipelineResult(
                outcome=PipelineOutcome.FLAGGED,
                ticket_id=ticket_id,
                message_id=message_id,
                flag_reason=screening.flag_reason,
            )

        passages = await self.retriever.retrieve(message.content, org_id)
        request = GenerationRequest(
            message=message.content,
            ticket_id=ticket_id,
            context=ticketing_service.build_ticket_context(ticket),
            knowledge_base=passages,
        )
        agent_result = await self.generator.generate(request)

        update = self.updater.apply(ticket, agent_result, expected_version)
        logger.info(
            "AI reply stored (transition=%s, passages=%d)",
            update.transition,
            len(passages),
            extra=log_context,
        )
        return PipelineResult(
            outcome=PipelineOutcome.REPLIED,
            ticket_id=ticket_id,
            message_id=message_id,
            agent_result=agent_result,
            reply_message_id=update.reply_message_id,
            transition=update.transition,
            changes=update.changes,
        )


def build_retriever(db: Session, provider: AIProvider, *, preview: bool = False) -> KnowledgeRetriever:
    index = get_knowledge_index(settings.KNOWLEDGE_INDEX_BACKEND, db, provider)
    return KnowledgeRetriever(
        index,
        match_threshold=settings.KNOWLEDGE_MATCH_THRESHOLD,
        match_count=(
            settings.KNOWLEDGE_PREVIEW_MATCH_COUNT if preview else settings.KNOWLEDGE_MATCH_COUNT
        ),
    )


def build_generator(provider: AIProvider) -> ResponseGenerator:
    return ResponseGenerator(
        provider,
        model=settings.ASSISTANT_MODEL,
        temperature=settings.ASSISTANT_TEMPERATURE,
        max_tokens=settings.ASSISTANT_MAX_TOKENS,
    )


def build_pipeline(db: Session, provider: AIProvider | None = None) -> TicketMessagePipeline:
    """Wire the configured stages around one session."""
    provider = provider or get_configured_provider()
    return TicketMessagePipeline(
        db,
        screener=ContentScreener(provider),
        retriever=build_retriever(db, provider),
        generator=build_generator(provider),
        updater=TicketStateUpdater(db),
        timeout=settings.PIPELINE_RUN_TIMEOUT_SECONDS,
    )


async def preview_reply(
    db: Session, ticket_id: UUID, message: str, provider: AIProvider | None = None
) -> tuple[AgentResult, list]:
    """Draft a reply for arbitrary text without persisting anything."""
    ticket = ticketing_service.require_ticket(db, ticket_id)
    provider = provider or get_configured_provider()
    passages = await build_retriever(db, provider, preview=True).retrieve(
        message, ticket.organization_id
    )
    result = await build_generator(provider).generate(
        GenerationRequest(
            message=message,
            ticket_id=ticket.id,
            context=ticketing_service.build_ticket_context(ticket),
            knowledge_base=passages,
        )
    )
    return result, passages
