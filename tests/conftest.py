"""Pytest configuration and fixtures for API tests."""
import os

# Set test env BEFORE any imports that use config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "development"
os.environ["JWT_SECRET"] = "test-secret-that-is-long-enough-for-hs256-signing"
os.environ["INITIAL_ADMIN_EMAIL"] = "admin@krakengaming.org"
os.environ["INITIAL_ADMIN_USERNAME"] = "admin"
os.environ["INITIAL_ADMIN_PASSWORD"] = "testpass123"
os.environ["ADMIN_EMAILS"] = ""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from web.api.main import create_app
from web.models import Database, User
from web.session import create_session_token


@pytest.fixture
async def db():
    """Fresh in-memory database per test (ASGI lifespan doesn't run with httpx, so create tables here)."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    database = Database("sqlite+aiosqlite:///:memory:", engine=engine)
    await database.create_all()
    yield database
    await database.dispose()


@pytest.fixture
def app(db):
    return create_app(db)


@pytest.fixture
async def client(app):
    """Async HTTP client for testing the API."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def make_user(db):
    """Insert a user directly. Password hash is a placeholder; use /api/auth/register to test logins."""

    async def _make(email: str, username: str | None = None, role: str = "member") -> User:
        async with db.session_factory() as session:
            user = User(
                email=email,
                username=username or email.split("@")[0],
                password_hash="!",
                role=role,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _make


def bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {create_session_token(user)}"}


@pytest.fixture
async def admin(make_user):
    return await make_user("captain@krakengaming.org", "captain", role="admin")


@pytest.fixture
async def member(make_user):
    return await make_user("sailor@krakengaming.org", "sailor")


@pytest.fixture
def admin_headers(admin):
    return bearer(admin)


@pytest.fixture
def member_headers(member):
    return bearer(member)


@pytest.fixture
def auth_for():
    """Authorization headers for any user."""
    return bearer
