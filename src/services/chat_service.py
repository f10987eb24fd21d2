"""Conversational financial coach backed by the user's spending summary."""
import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from schemas.chat import ChatMessage
from services.exceptions import LLMServiceError
from services.llm_client import CompletionClient
from services.summary_service import SummaryCache

logger = logging.getLogger(__name__)

# Last 3 turns (user + assistant each)
MAX_HISTORY = 6
CHAT_MAX_TOKENS = 256
CHAT_TEMPERATURE = 0.7

EMPTY_REPLY = "Sorry, I couldn't generate a response."
FAILURE_REPLY = "Sorry, I'm having trouble right now. Please try again in a moment."

SYSTEM_PROMPT = (
    "You are FinMind AI, a concise financial coach. User's data: {summary}\n"
    "Rules: Use ₹(INR). 2-3 sentences max. Be specific with numbers from the data. "
    "Be encouraging but honest."
)


def build_messages(
    summary_text: str,
    message: str,
    history: list[ChatMessage],
) -> list[dict]:
    """Assemble the system prompt, trimmed history, and the new user message."""
    messages = [{"role": "system", "content": SYSTEM_PROMPT.format(summary=summary_text)}]
    for turn in history[-MAX_HISTORY:]:
        messages.append(
            {
                "role": "user" if turn.role == "user" else "assistant",
                "content": turn.content,
            },
        )
    messages.append({"role": "user", "content": message})
    return messages


async def chat_with_coach(
    db: AsyncSession,
    user_id: UUID,
    message: str,
    history: list[ChatMessage],
    *,
    llm: CompletionClient,
    summary_cache: SummaryCache,
) -> str:
    """
    Answer a user's question using their cached spending summary.

    LLM failures are turned into a friendly apology rather than an error response.
    """
    summary = await summary_cache.get_summary(db, user_id)
    messages = build_messages(summary.to_prompt(), message, history)

    try:
        reply = await llm.complete(
            messages,
            model=llm.text_model,
            max_tokens=CHAT_MAX_TOKENS,
            temperature=CHAT_TEMPERATURE,
        )
    except LLMServiceError as e:
        logger.warning("coach_chat_failed user_id=%s error=%s", user_id, e)
        return FAILURE_REPLY

    return reply or EMPTY_REPLY
