"""Pytest configuration and shared fixtures."""

import os

# Settings are read at import time, so the test environment goes first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["DATABASE_AUTO_MIGRATE"] = "false"
os.environ.setdefault("JWT_SECRET", "test-secret")

from typing import AsyncGenerator, Callable  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from claimflow.core.database import Base, get_async_session  # noqa: E402
from claimflow.core.dependencies import get_storage_service  # noqa: E402
from claimflow.core.jwt import jwt_service  # noqa: E402
from claimflow.core.security import hash_password  # noqa: E402
from claimflow.database import models  # noqa: E402
from claimflow.main import app  # noqa: E402
from claimflow.schemas.enums import UserRole  # noqa: E402
from claimflow.services.storage_service import StorageService  # noqa: E402
from claimflow.workflow.transitions import Actor  # noqa: E402

TEST_PASSWORD = "s3cret-pass"


@pytest_asyncio.fixture
async def session_maker() -> AsyncGenerator[async_sessionmaker, None]:
    """In-memory SQLite database shared by every session of one test.

    Yields:
        async_sessionmaker: Factory bound to a fresh schema
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_maker: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture
def user_password() -> str:
    return TEST_PASSWORD


@pytest.fixture
def storage(tmp_path) -> StorageService:
    """Storage writing into the test's temporary directory."""
    return StorageService(
        upload_dir=str(tmp_path / "uploads"),
        public_prefix="/uploads",
        max_file_size=1024,
    )


@pytest_asyncio.fixture
async def users(db_session: AsyncSession) -> dict[str, models.User]:
    """One account per role, plus a second ordinary user.

    Returns:
        dict: Users keyed by ``claimant``, ``other``, ``insurer``, ``manager``
    """
    accounts = {
        "claimant": models.User(
            name="Somchai Claimant",
            email="somchai@example.com",
            role=UserRole.USER,
            employee_number="E-001",
            password_hash=hash_password(TEST_PASSWORD),
        ),
        "other": models.User(name="Anong Other", email="anong@example.com", role=UserRole.USER),
        "insurer": models.User(name="Insurer Staff", email="insurer@example.com", role=UserRole.INSURANCE),
        "manager": models.User(name="Manager Boss", email="manager@example.com", role=UserRole.MANAGER),
    }
    db_session.add_all(accounts.values())
    await db_session.commit()
    return accounts


@pytest.fixture
def actor_for() -> Callable[[models.User], Actor]:
    def _actor(user: models.User) -> Actor:
        return Actor(id=user.id, role=user.role)

    return _actor


@pytest.fixture
def auth_headers() -> Callable[[models.User], dict[str, str]]:
    """Build an Authorization header carrying a token for a user."""

    def _headers(user: models.User) -> dict[str, str]:
        token = jwt_service.create_token(
            user_id=str(user.id), email=user.email, name=user.name, role=user.role.value
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest_asyncio.fixture
async def client(
    session_maker: async_sessionmaker, storage: StorageService
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client against the app, wired to the test database and storage."""

    async def _session() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = _session
    app.dependency_overrides[get_storage_service] = lambda: storage
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides = {}
