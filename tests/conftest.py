"""Pytest fixtures for testing."""
import os

# Must be set before any app imports that trigger Settings validation
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "development"

from collections.abc import AsyncGenerator  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from core.config import Settings  # noqa: E402
from models.base import Base  # noqa: E402
from models.category import Category  # noqa: E402
from services.category_service import (  # noqa: E402
    CategoryCache,
    ensure_default_categories,
    list_categories,
)
from services.summary_service import SummaryCache  # noqa: E402


class FakeLLM:
    """
    Stand-in for LLMClient that records calls and replays canned answers.

    Set `replies` to queue answers (an empty queue answers "") or `error` to make
    every call raise.
    """

    text_model = "fake-text-model"
    vision_model = "fake-vision-model"

    def __init__(self) -> None:
        self.replies: list[str] = []
        self.error: Exception | None = None
        self.calls: list[dict[str, Any]] = []

    async def complete(
        self,
        messages: list[dict[str, Any]],
        *,
        model: str | None = None,
        max_tokens: int = 256,
        temperature: float = 0.0,
    ) -> str:
        self.calls.append(
            {
                "messages": messages,
                "model": model,
                "max_tokens": max_tokens,
                "temperature": temperature,
            },
        )
        if self.error is not None:
            raise self.error
        return self.replies.pop(0) if self.replies else ""

    async def aclose(self) -> None:
        pass


@pytest.fixture
def test_settings() -> Settings:
    """Settings with fixed, distinct token secrets."""
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///:memory:",
        JWT_SECRET="test-access-secret",
        JWT_REFRESH_SECRET="test-refresh-secret",
        ENVIRONMENT="development",
    )


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Create a fresh in-memory SQLite database for each test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Async session on the test database."""
    session_factory = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session


@pytest.fixture
async def seeded_categories(db_session: AsyncSession) -> list[Category]:
    """Seed the default categories and return them ordered by id."""
    await ensure_default_categories(db_session)
    await db_session.commit()
    return await list_categories(db_session)


@pytest.fixture
def category_cache() -> CategoryCache:
    return CategoryCache()


@pytest.fixture
def summary_cache() -> SummaryCache:
    return SummaryCache()


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
async def client(
    db_session: AsyncSession,
    seeded_categories: list[Category],  # noqa: ARG001
    test_settings: Settings,
    category_cache: CategoryCache,
    summary_cache: SummaryCache,
    fake_llm: FakeLLM,
) -> AsyncGenerator[AsyncClient]:
    """Create a test client with database, settings, cache and LLM overrides."""
    from api.dependencies import (  # noqa: PLC0415
        get_async_session,
        get_category_cache,
        get_llm_client,
        get_settings,
        get_summary_cache,
    )
    from api.main import app  # noqa: PLC0415

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_category_cache] = lambda: category_cache
    app.dependency_overrides[get_summary_cache] = lambda: summary_cache
    app.dependency_overrides[get_llm_client] = lambda: fake_llm

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()
