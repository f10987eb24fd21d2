"""Financial coach chat endpoint."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import (
    get_async_session,
    get_current_identity,
    get_llm_client,
    get_summary_cache,
)
from core.request_context import AuthIdentity
from schemas.chat import ChatRequest, ChatResponse
from services.chat_service import chat_with_coach
from services.llm_client import LLMClient
from services.summary_service import SummaryCache

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("", response_model=ChatResponse)
async def send_message(
    data: ChatRequest,
    identity: AuthIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
    llm: LLMClient = Depends(get_llm_client),
    summary_cache: SummaryCache = Depends(get_summary_cache),
) -> ChatResponse:
    """Ask the coach a question about your spending."""
    reply = await chat_with_coach(
        db,
        identity.user_id,
        data.message,
        data.history,
        llm=llm,
        summary_cache=summary_cache,
    )
    return ChatResponse(reply=reply)
