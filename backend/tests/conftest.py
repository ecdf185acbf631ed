"""
Shared test fixtures.

Environment defaults are set before any application module is imported:
`api.main` builds its module-level app from settings at import time.
"""
import os

os.environ.setdefault("PORT", "3001")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("WHITELISTED_IPS", "127.0.0.1")
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:5173")
os.environ.setdefault("JWT_SECRET", "test-secret")

from collections.abc import AsyncGenerator, Callable  # noqa: E402

import fakeredis  # noqa: E402
import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from api.main import create_app  # noqa: E402
from core.cache import Cache  # noqa: E402
from core.config import Settings, get_settings  # noqa: E402
from core.redis import RedisClient, set_redis_client  # noqa: E402
from core.security import create_access_token  # noqa: E402
from db.session import get_async_session  # noqa: E402
from models import Base  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    """Settings built from the test environment."""
    return get_settings()


@pytest.fixture
async def redis_client() -> AsyncGenerator[RedisClient]:
    """
    RedisClient backed by an in-memory fake server.

    Registered as the global client so the cache and the rate limiter use it.
    """
    fake = fakeredis.FakeAsyncRedis()
    await fake.flushall()
    client = RedisClient("redis://fake:6379/0", enabled=True, redis=fake)
    await client.connect()
    set_redis_client(client)
    yield client
    set_redis_client(None)
    await client.close()


@pytest.fixture
def cache(redis_client: RedisClient, settings: Settings) -> Cache:
    """Cache accessor over the fake Redis client."""
    return Cache(redis_client, default_ttl=settings.redis_expiration)


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """In-memory SQLite engine with the schema created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """A database session for direct repository/service tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_client(
    session_factory: async_sessionmaker[AsyncSession],
    redis_client: RedisClient,  # noqa: ARG001
) -> Callable[..., AsyncClient]:
    """Factory for HTTP clients against an app built with the given settings."""
    def _make(
        app_settings: Settings | None = None,
        raise_app_exceptions: bool = True,
    ) -> AsyncClient:
        app: FastAPI = create_app(app_settings or get_settings())

        async def _override_session() -> AsyncGenerator[AsyncSession]:
            async with session_factory() as session:
                yield session

        app.dependency_overrides[get_async_session] = _override_session
        transport = ASGITransport(app=app, raise_app_exceptions=raise_app_exceptions)
        return AsyncClient(transport=transport, base_url="http://test")

    return _make


@pytest.fixture
async def client(make_client: Callable[..., AsyncClient]) -> AsyncGenerator[AsyncClient]:
    """HTTP client against the application with default test settings."""
    async with make_client() as http_client:
        yield http_client


@pytest.fixture
def auth_headers(settings: Settings) -> Callable[[int], dict[str, str]]:
    """Build an Authorization header for a user id."""
    def _headers(user_id: int) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id, settings)}"}

    return _headers
