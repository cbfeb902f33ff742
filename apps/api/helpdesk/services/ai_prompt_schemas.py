"""Pydantic schemas for AI responses."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from helpdesk.db.enums import NextAction


class AgentResult(BaseModel):
    """Structured output of the support response generator."""

    model_config = ConfigDict(extra="ignore")

    response: str = Field(min_length=1)
    needs_human_review: bool = False
    human_review_reason: str | None = None
    confidence_score: float = 0.0
    next_action: NextAction = NextAction.NONE
    suggested_knowledge_articles: list[str] = Field(default_factory=list)

    @field_validator("next_action", mode="before")
    @classmethod
    def _normalize_next_action(cls, value):
        if isinstance(value, NextAction):
            return value
        if isinstance(value, str):
            cleaned = value.strip().lower()
            if cleaned in {action.value for action in NextAction}:
                return cleaned
        return NextAction.NONE

    @field_validator("confidence_score", mode="before")
    @classmethod
    def _clamp_confidence(cls, value):
        try:
            score = float(value)
        except (TypeError, ValueError):
            return 0.0
        return min(max(score, 0.0), 1.0)

    @field_validator("human_review_reason", mode="before")
    @classmethod
    def _blank_reason_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("suggested_knowledge_articles", mode="before")
    @classmethod
    def _coerce_articles(cls, value):
        if value is None:
            return []
        if isinstance(value, list):
            return [str(item) for item in value]
        return [str(value)]
