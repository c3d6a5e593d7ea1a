"""
Pytest configuration and shared fixtures.

Tests run against an in-memory SQLite database built from SQLModel.metadata,
so no database server is needed. Redis is replaced by a mock.
"""

import os

# Settings are read at import time; these must be set before importing app
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("TRACKER_ENABLED", "true")
os.environ.setdefault("GEOIP_ENABLED", "false")
os.environ["SMTP_HOST"] = ""

from collections.abc import AsyncGenerator  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

import app.models  # noqa: E402, F401  (registers tables on SQLModel.metadata)
from app.config import UserRole, settings  # noqa: E402
from app.core.database import get_db  # noqa: E402
from app.core.redis import get_redis  # noqa: E402
from app.core.security import create_access_token, get_password_hash  # noqa: E402
from app.main import app as main_app  # noqa: E402
from app.models.post import Posts  # noqa: E402
from app.models.user import Users  # noqa: E402

TEST_PASSWORD = "TestPassword123"

# Hashing is slow on purpose; do it once for the whole session
TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)

ADMIN_USER_ID = 2
REGULAR_USER_ID = 3
OTHER_USER_ID = 4


@pytest.fixture(scope="function")
async def engine():
    """
    Fresh in-memory database per test.

    StaticPool keeps a single connection so every session sees the same
    in-memory database.
    """
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite defers BEGIN on its own, which breaks SAVEPOINT (begin_nested)
    @event.listens_for(test_engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(test_engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture(scope="function")
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Database session with the built-in accounts already committed.

    Users:
    - 1: anonymous account (owner of logged out reviews)
    - 2: admin
    - 3: regular user
    - 4: another regular user
    """
    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        session.add_all(
            [
                Users(
                    user_id=settings.ANONYMOUS_USER_ID,
                    username=settings.ANONYMOUS_USERNAME,
                    password="!",
                    email="anonymous@example.com",
                ),
                Users(
                    user_id=ADMIN_USER_ID,
                    username="admin",
                    password=TEST_PASSWORD_HASH,
                    email="admin@example.com",
                    role=UserRole.ADMIN,
                ),
                Users(
                    user_id=REGULAR_USER_ID,
                    username="testuser",
                    password=TEST_PASSWORD_HASH,
                    email="test@example.com",
                ),
                Users(
                    user_id=OTHER_USER_ID,
                    username="otheruser",
                    password=TEST_PASSWORD_HASH,
                    email="other@example.com",
                ),
            ]
        )
        await session.commit()

        yield session

        await session.rollback()


@pytest.fixture
def mock_redis():
    """Mock Redis client with pipeline support.

    pipeline() is synchronous, as are pipeline methods (incr, expire).
    Only pipeline.execute() is async.
    """
    client = AsyncMock()
    client.get.return_value = None
    mock_pipe = MagicMock()
    mock_pipe.execute = AsyncMock(return_value=[])
    client.pipeline = MagicMock(return_value=mock_pipe)
    return client


@pytest.fixture(scope="function")
def app(db_session: AsyncSession, mock_redis) -> FastAPI:
    """
    FastAPI app wired to the test database session and mock Redis.

    The get_db override commits and rolls back like the real dependency.
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    async def override_get_redis():
        yield mock_redis

    main_app.dependency_overrides[get_db] = override_get_db
    main_app.dependency_overrides[get_redis] = override_get_redis

    yield main_app

    main_app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """
    Unauthenticated async HTTP client.

    Usage:
        async def test_endpoint(client):
            response = await client.get("/api/v1/posts")
            assert response.status_code == 200
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


def auth_headers(user_id: int) -> dict[str, str]:
    """Bearer header for a user id."""
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return auth_headers(ADMIN_USER_ID)


@pytest.fixture
def user_headers() -> dict[str, str]:
    return auth_headers(REGULAR_USER_ID)


@pytest.fixture
def other_user_headers() -> dict[str, str]:
    return auth_headers(OTHER_USER_ID)


# =============================================================================
# Test Data Fixtures
# =============================================================================


@pytest.fixture
async def test_post(db_session: AsyncSession) -> Posts:
    """A committed post to attach reviews to."""
    post = Posts(
        title="Ironman Lanzarote",
        body="Race report from the island.",
        img="https://example.com/lanzarote.jpg",
        num=1,
    )
    db_session.add(post)
    await db_session.commit()
    await db_session.refresh(post)
    return post


@pytest.fixture
def clean_review_text() -> str:
    return "Great race report, thanks for sharing your training."


@pytest.fixture
def spam_review_text() -> str:
    return "Call 555-123-4567 now, visit www.example.xyz for a free discount!!!"
