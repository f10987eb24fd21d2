"""FastAPI application entry point."""
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from api.routers import auth, categories, chat, health, receipts, transactions
from core.config import get_settings
from db.session import engine, get_session_factory
from models.base import Base
from services.category_service import CategoryCache, ensure_default_categories
from services.llm_client import LLMClient
from services.summary_service import SummaryCache

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan - startup and shutdown."""
    app_settings = get_settings()

    # Startup: create tables and seed the shared categories
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    category_cache = CategoryCache(ttl_seconds=app_settings.category_cache_ttl_seconds)
    async with get_session_factory()() as session:
        await ensure_default_categories(session, category_cache)
        await session.commit()

    app.state.category_cache = category_cache
    app.state.summary_cache = SummaryCache(
        ttl_seconds=app_settings.summary_cache_ttl_seconds,
    )
    app.state.llm_client = LLMClient.from_settings(app_settings)
    if not app_settings.groq_api_key:
        logger.warning("groq_api_key_missing classification falls back to Other")

    yield

    # Shutdown: close the LLM connection pool and the database engine
    await app.state.llm_client.aclose()
    await engine.dispose()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request and add security headers to response."""
        response = await call_next(request)
        response.headers["Strict-Transport-Security"] = (
            "max-age=31536000; includeSubDomains"
        )
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        return response


def _validation_message(error: dict) -> str:
    """Render the first pydantic error as one sentence for the client."""
    location = [str(part) for part in error.get("loc", ()) if part != "body"]
    field = location[-1] if location else None
    if error.get("type") == "missing":
        return f"{field} is required." if field else "Request body is required."
    ctx_error = error.get("ctx", {}).get("error")
    if isinstance(ctx_error, ValueError):
        return str(ctx_error)
    message = error.get("msg", "Invalid request.")
    return f"{field}: {message}" if field else message


app_settings = get_settings()

app = FastAPI(
    title="FinMind API",
    description="Personal expense tracking with AI categorization and a spending coach.",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    _request: Request, exc: RequestValidationError,
) -> JSONResponse:
    """Report invalid request bodies as 400 with a single readable message."""
    errors = exc.errors()
    detail = _validation_message(errors[0]) if errors else "Invalid request."
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected errors and hide their internals from the client."""
    logger.exception(
        "unhandled_error method=%s path=%s", request.method, request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error"},
    )


# Security headers middleware (runs after CORS, adds headers to responses)
app.add_middleware(SecurityHeadersMiddleware)

# Credentials are allowed so the refresh cookie travels cross-origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(transactions.router)
app.include_router(categories.router)
app.include_router(receipts.router)
app.include_router(chat.router)
