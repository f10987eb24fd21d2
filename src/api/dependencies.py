"""FastAPI dependencies for injection."""
from fastapi import Request

from core.auth import get_current_identity
from core.config import get_settings
from db.session import get_async_session
from services.category_service import CategoryCache
from services.llm_client import LLMClient
from services.summary_service import SummaryCache


def get_category_cache(request: Request) -> CategoryCache:
    """Process-wide category cache created in the app lifespan."""
    return request.app.state.category_cache


def get_summary_cache(request: Request) -> SummaryCache:
    """Process-wide summary cache created in the app lifespan."""
    return request.app.state.summary_cache


def get_llm_client(request: Request) -> LLMClient:
    """Shared LLM client created in the app lifespan."""
    return request.app.state.llm_client


__all__ = [
    "get_async_session",
    "get_category_cache",
    "get_current_identity",
    "get_llm_client",
    "get_settings",
    "get_summary_cache",
]
