"""Test configuration and fixtures."""
import os

# Must be set before the application settings are imported
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["FRONTEND_URL"] = "http://frontend.test"
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from lms_backend.main import app
from lms_backend.database import get_db
from lms_backend.models.base import Base
from lms_backend.models.user import User
from lms_backend.core.auth import auth_service
from lms_backend.api.middleware import forgot_password_limiter

class RecordingMailer:
    """Stands in for the SMTP mailer and keeps every reset email."""

    def __init__(self):
        self.sent = []

    async def send_password_reset(self, to_email, reset_link, expire_minutes=60):
        self.sent.append({
            "to": to_email,
            "link": reset_link,
            "expire_minutes": expire_minutes,
        })

    @property
    def last_token(self) -> str:
        return self.sent[-1]["link"].rsplit("/", 1)[-1]


@pytest_asyncio.fixture
async def async_engine(tmp_path):
    """Create async engine backed by a per-test SQLite file."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine):
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def async_session(session_factory):
    """Create async session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def mailer(monkeypatch):
    recorder = RecordingMailer()
    monkeypatch.setattr(auth_service, "mailer", recorder)
    return recorder


@pytest_asyncio.fixture
async def client(session_factory, mailer):
    """HTTP client against the app with the database dependency overridden."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    forgot_password_limiter.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client

    app.dependency_overrides.clear()
    forgot_password_limiter.reset()


@pytest_asyncio.fixture
async def test_user(async_session):
    """Create test user."""
    user = User(
        email="test@example.com",
        password_hash=auth_service.hasher.hash("testpassword123"),
        first_name="Test",
        last_name="User",
        role="user",
    )

    async_session.add(user)
    await async_session.commit()
    await async_session.refresh(user)

    return user


@pytest.fixture
def auth_headers(test_user):
    """Create authorization headers for test user."""
    access_token = auth_service.tokens.issue(test_user)
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture
def fetch_user(session_factory):
    """Read a user through a fresh session, bypassing any identity map."""

    async def _fetch(email: str):
        async with session_factory() as session:
            result = await session.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()

    return _fetch
