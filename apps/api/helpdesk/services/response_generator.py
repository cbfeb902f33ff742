"""Generate the AI reply for a ticket message."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

import httpx

from helpdesk.core.exceptions import AIResponseError
from helpdesk.services.ai_prompt_registry import NO_KNOWLEDGE_PLACEHOLDER, get_prompt
from helpdesk.services.ai_prompt_schemas import AgentResult
from helpdesk.services.ai_provider import AIProvider, ChatMessage
from helpdesk.services.ai_response_validation import parse_model
from helpdesk.services.knowledge_index import KnowledgePassage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TicketContext:
    status: str
    priority: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    created_by: str | None = None
    assigned_to: str | None = None
    assigned_team: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "priority": self.priority,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "created_by": self.created_by,
            "assigned_to": self.assigned_to,
            "assigned_team": self.assigned_team,
        }


@dataclass(frozen=True)
class GenerationRequest:
    message: str
    ticket_id: UUID
    context: TicketContext
    knowledge_base: list[KnowledgePassage] = field(default_factory=list)


def format_knowledge(passages: list[KnowledgePassage]) -> str:
    if not passages:
        return NO_KNOWLEDGE_PLACEHOLDER
    return "\n\n".join(f"{p.source_type.upper()}: {p.content}" for p in passages)


class ResponseGenerator:
    """Black-box text generation honoring the AgentResult contract."""

    prompt_key = "support_agent"

    def __init__(
        self,
        provider: AIProvider,
        *,
        model: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 2000,
    ):
        self.provider = provider
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    def build_messages(self, request: GenerationRequest) -> list[ChatMessage]:
        prompt = get_prompt(self.prompt_key)
        context = request.context.to_dict()
        user = prompt.render_user(
            ticket_id=request.ticket_id,
            message=request.message,
            knowledge_base=format_knowledge(request.knowledge_base),
            **{key: value if value is not None else "N/A" for key, value in context.items()},
        )
        return [
            ChatMessage(role="system", content=prompt.system),
            ChatMessage(role="user", content=user),
        ]

    async def generate(self, request: GenerationRequest) -> AgentResult:
        messages = self.build_messages(request)
        try:
            response = await self.provider.chat(
                messages,
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                json_mode=True,
            )
        except (httpx.HTTPError, KeyError, IndexError) as exc:
            raise AIResponseError(
                f"Generation call failed: {type(exc).__name__}: {exc}"
            ) from exc

        result = parse_model(AgentResult, response.content)
        if result is None:
            raise AIResponseError("Generation output did not match the agent result schema")

        logger.info(
            "Generated reply (next_action=%s, confidence=%.2f, review=%s, tokens=%d, cost=$%s)",
            result.next_action.value,
            result.confidence_score,
            result.needs_human_review,
            response.total_tokens,
            response.estimated_cost_usd.quantize(Decimal("0.0001")),
        )
        return result
