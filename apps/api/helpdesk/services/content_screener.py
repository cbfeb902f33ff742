"""Content screening for inbound customer messages."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from helpdesk.core.exceptions import ScreenerUnavailableError
from helpdesk.services.ai_provider import AIProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScreeningResult:
    is_flagged: bool
    flag_reason: str | None = None


class ContentScreener:
    """Run a message through the provider's moderation endpoint."""

    def __init__(self, provider: AIProvider):
        self.provider = provider

    async def screen(self, text: str, attachments: list[str] | None = None) -> ScreeningResult:
        """
        Classify a message as flagged or not.

        Attachment ids are accepted for the trigger contract; only the text is
        moderated. Any failure of the moderation call raises
        ScreenerUnavailableError so the caller never treats an unscreened
        message as clean.
        """
        try:
            moderation = await self.provider.moderate(text)
        except (httpx.HTTPError, KeyError, IndexError, ValueError) as exc:
            raise ScreenerUnavailableError(
                f"Moderation call failed: {type(exc).__name__}: {exc}"
            ) from exc

        if not moderation.flagged:
            return ScreeningResult(is_flagged=False)

        reason = ", ".join(moderation.categories) or "unspecified"
        logger.info(
            "Message flagged by moderation (categories=%s, attachments=%d)",
            reason,
            len(attachments or []),
        )
        return ScreeningResult(is_flagged=True, flag_reason=reason)
