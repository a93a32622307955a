import asyncio
from dataclasses import dataclass
from typing import Optional

import httpx
from pydantic import BaseModel, Field

from .config import ChatContext
from .knowledge import KnowledgeEntry
from .logging import get_logger

logger = get_logger(__name__)

SOURCE_KNOWLEDGE_BASE = "knowledge_base"
SOURCE_REMOTE = "gemini_api"
SOURCE_FALLBACK = "fallback"


@dataclass(frozen=True)
class Reply:
    text: str
    source: str
    degraded: bool = False
    entry: Optional[KnowledgeEntry] = None


class FallbackReply(BaseModel):
    """Body of a successful reply from the remote proxy."""

    reply: str = Field(min_length=1)


# =========================
# Canned replies
# =========================
def degraded_response() -> str:
    return (
        "The AI assistant isn't available right now, but I can still help with the course basics.\n\n"
        "Try asking about:\n"
        "• **Importing, merging and reshaping data** (try: “How do I merge two datasets?”)\n"
        "• **Data cleaning** (try: “How do I handle missing values?”)\n"
        "• **Causal inference** (try: “What is difference-in-differences?”)\n"
        "• **Regression and fixed effects** (try: “clustered standard errors”)\n"
        "• **Git and replicability** (try: “How do I use Git?”)\n"
        "• **Machine learning, NLP and LLMs** (try: “What does the machine learning module cover?”)\n\n"
        "Which of those do you need?"
    )


def rephrase_response() -> str:
    return (
        "I'm not sure I understood that. Could you try rephrasing?\n"
        "Mentioning a topic helps, e.g. “merge”, “missing values”, “DiD”, “fixed effects” or “Git”."
    )


# =========================
# Dispatcher
# =========================
class ResponseDispatcher:
    """
    Answers a message from the knowledge base, then the remote proxy, then a
    canned degraded reply. ``respond`` never raises for remote failures.
    """

    def __init__(self, context: ChatContext, client: Optional[httpx.AsyncClient] = None):
        self.context = context
        self.matcher = context.matcher
        self.settings = context.settings
        self._client = client

    async def respond(self, user_message: str) -> Reply:
        result = self.matcher.match(user_message)
        if result.found:
            await self._pause()
            return Reply(result.entry.answer, SOURCE_KNOWLEDGE_BASE, entry=result.entry)

        if not self.settings.fallback_enabled:
            return Reply(rephrase_response(), SOURCE_FALLBACK)

        try:
            # the deadline covers the whole exchange, including a slow body
            text = await asyncio.wait_for(self._ask_remote(user_message), self.settings.fallback_timeout)
        except (httpx.HTTPError, ValueError, asyncio.TimeoutError) as exc:
            # ValueError covers undecodable JSON and pydantic validation errors
            logger.warning("fallback_failed", error_type=type(exc).__name__, error=str(exc))
            return Reply(degraded_response(), SOURCE_FALLBACK, degraded=True)
        return Reply(text, SOURCE_REMOTE)

    async def _pause(self) -> None:
        if self.settings.reply_delay > 0:
            await asyncio.sleep(self.settings.reply_delay)

    async def _ask_remote(self, message: str) -> str:
        if self._client is not None:
            return await self._post(self._client, message)
        async with httpx.AsyncClient() as client:
            return await self._post(client, message)

    async def _post(self, client: httpx.AsyncClient, message: str) -> str:
        response = await client.post(
            self.settings.fallback_url,
            json={"message": message},
            timeout=self.settings.fallback_timeout,
        )
        response.raise_for_status()
        payload = FallbackReply.model_validate(response.json())
        return payload.reply
