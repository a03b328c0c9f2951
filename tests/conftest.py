import os

# Settings are read at import time, so test defaults go in before any app import
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-safekey-0123456789abcdef")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_safekey.db")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("PROVIDER_VALIDATION_ENABLED", "true")
os.environ.setdefault("LOG_DIR", "./test_logs")

import pytest
from typing import AsyncGenerator, Generator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool
from app.database import Base, get_db
from app.core.event_bus import event_bus
from app.services.history_service import ActionContext
from app.services.user_service import UserService
from app.core.security import create_access_token

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test_safekey.db"

# Create test engine
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    poolclass=NullPool,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    # Import models so every table is registered
    import app.models  # noqa: F401

    # Create tables
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # Create session
    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    # Drop tables
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def reset_event_bus():
    """Drop subscribers left behind by a test."""
    yield
    event_bus._events.clear()


@pytest.fixture(scope="function")
def client() -> Generator:
    """Create a sync test client (doesn't require db_session)."""
    from fastapi.testclient import TestClient
    from app.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="function")
async def async_client(db_session: AsyncSession) -> AsyncGenerator:
    """Create an async test client with database session override."""
    from httpx import AsyncClient, ASGITransport
    from app.main import app

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def user(db_session: AsyncSession):
    """A registered user with default settings."""
    return await UserService.create_user(
        db_session,
        email="alice@example.com",
        password="alice-password",
        full_name="Alice"
    )


@pytest.fixture
async def other_user(db_session: AsyncSession):
    """A second user, for ownership checks."""
    return await UserService.create_user(
        db_session,
        email="bob@example.com",
        password="bob-password"
    )


@pytest.fixture
def context(user) -> ActionContext:
    """Action context of the default user."""
    return ActionContext(user_id=user.id, ip_address="127.0.0.1", user_agent="pytest", request_id="test-request")


@pytest.fixture
def auth_headers(user) -> dict:
    """Bearer header for the default user."""
    token = create_access_token(data={"sub": str(user.id), "email": user.email})
    return {"Authorization": f"Bearer {token}"}
