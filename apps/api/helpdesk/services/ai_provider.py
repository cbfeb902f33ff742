"""AI Provider abstraction layer.

One interface for the three external AI capabilities the ticket pipeline
uses: chat completion, content moderation and text embeddings.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

import httpx

logger = logging.getLogger(__name__)


@dataclass
class ChatMessage:
    """A single message in a conversation."""

    role: str  # 'system', 'user', 'assistant'
    content: str


@dataclass
class ChatResponse:
    """Response from an AI provider."""

    content: str
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    model: str

    @property
    def estimated_cost_usd(self) -> Decimal:
        """Estimate cost based on model pricing (approximate)."""
        # Pricing per 1M tokens
        pricing = {
            "gpt-4o-mini": {"input": Decimal("0.15"), "output": Decimal("0.60")},
            "gpt-4o": {"input": Decimal("2.50"), "output": Decimal("10.00")},
        }

        model_pricing = pricing.get(
            self.model, {"input": Decimal("0"), "output": Decimal("0")}
        )
        input_cost = (Decimal(self.prompt_tokens) / Decimal("1000000")) * model_pricing[
            "input"
        ]
        output_cost = (
            Decimal(self.completion_tokens) / Decimal("1000000")
        ) * model_pricing["output"]
        return input_cost + output_cost


@dataclass
class ModerationResult:
    """Outcome of a moderation check."""

    flagged: bool
    categories: list[str] = field(default_factory=list)


class AIProvider(ABC):
    """Abstract base class for AI providers."""

    @abstractmethod
    async def chat(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        json_mode: bool = False,
    ) -> ChatResponse:
        """Send a chat completion request."""
        pass

    @abstractmethod
    async def moderate(self, text: str) -> ModerationResult:
        """Classify text against the provider's moderation categories."""
        pass

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Return one embedding per input text, in input order."""
        pass

    @abstractmethod
    async def validate_key(self) -> bool:
        """Validate that the API key is working."""
        pass


class OpenAIProvider(AIProvider):
    """OpenAI API provider."""

    def __init__(
        self,
        api_key: str,
        default_model: str = "gpt-4o",
        *,
        base_url: str = "https://api.openai.com/v1",
        moderation_model: str = "omni-moderation-latest",
        embedding_model: str = "text-embedding-3-large",
        embedding_dimensions: int | None = 1536,
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.default_model = default_model
        self.base_url = base_url.rstrip("/")
        self.moderation_model = moderation_model
        self.embedding_model = embedding_model
        self.embedding_dimensions = embedding_dimensions
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def _post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                f"{self.base_url}{path}", headers=self._headers(), json=body
            )
            response.raise_for_status()
            return response.json()

    async def chat(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        json_mode: bool = False,
    ) -> ChatResponse:
        model = model or self.default_model

        body: dict[str, Any] = {
            "model": model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            body["response_format"] = {"type": "json_object"}

        data = await self._post("/chat/completions", body)

        usage = data.get("usage", {})
        return ChatResponse(
            content=data["choices"][0]["message"]["content"],
            prompt_tokens=usage.get("prompt_tokens", 0),
            completion_tokens=usage.get("completion_tokens", 0),
            total_tokens=usage.get("total_tokens", 0),
            model=model,
        )

    async def moderate(self, text: str) -> ModerationResult:
        data = await self._post(
            "/moderations", {"input": text, "model": self.moderation_model}
        )
        result = data["results"][0]
        categories = result.get("categories") or {}
        return ModerationResult(
            flagged=bool(result.get("flagged")),
            categories=[name for name, hit in categories.items() if hit],
        )

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        body: dict[str, Any] = {"model": self.embedding_model, "input": texts}
        if self.embedding_dimensions:
            body["dimensions"] = self.embedding_dimensions
        data = await self._post("/embeddings", body)
        rows = sorted(data.get("data", []), key=lambda row: row.get("index", 0))
        return [row["embedding"] for row in rows]

    async def validate_key(self) -> bool:
        """Test the API key with a minimal request."""
        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.get(
                    f"{self.base_url}/models",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
                return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning(f"OpenAI key validation failed: {e}")
            return False


def get_provider(
    provider_name: str, api_key: str, model: str | None = None, **options: Any
) -> AIProvider:
    """Factory function to get the appropriate AI provider."""
    if provider_name == "openai":
        return OpenAIProvider(api_key, default_model=model or "gpt-4o", **options)
    else:
        raise ValueError(f"Unknown provider: {provider_name}")


def get_configured_provider() -> AIProvider:
    """Build the provider described by application settings."""
    from helpdesk.core.config import settings

    return get_provider(
        settings.AI_PROVIDER,
        settings.OPENAI_API_KEY,
        settings.ASSISTANT_MODEL,
        base_url=settings.OPENAI_BASE_URL,
        moderation_model=settings.MODERATION_MODEL,
        embedding_model=settings.EMBEDDING_MODEL,
        embedding_dimensions=settings.EMBEDDING_DIMENSIONS,
        timeout=settings.AI_REQUEST_TIMEOUT_SECONDS,
    )
