"""Shared test fixtures: settings, in-memory SQLite database, test client."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from sprig.config import Settings
from sprig.database import Database
from sprig.main import create_app
from sprig.models.user import ensure_user_schema

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def build_settings(**overrides) -> Settings:
    values = {
        "auth_key": "test-auth-key",
        "session_cookie_name": "sid",
        "session_cookie_name_active": "sid_active",
        "session_ttl": 3600,
        "session_ttl_guest": 600,
        "session_cookie_http_only": True,
        "base_uri": "/",
        "uri_login": "/login",
        "uri_logout": "/logout",
        "datetime_format": "%Y/%m/%d %H:%M",
        "datetime_offset": "-5 hours",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return build_settings()


@pytest.fixture
def make_settings():
    """Factory for settings with overrides."""
    return build_settings


@pytest_asyncio.fixture
async def db():
    """Yield a Database on a fresh in-memory SQLite with the users table."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool, echo=False)
    database = Database(engine)
    await ensure_user_schema(database)
    yield database
    await database.dispose()


@pytest_asyncio.fixture
async def client(db: Database, settings: Settings) -> AsyncClient:
    """Yield an httpx AsyncClient wired to the test DB.

    The https base URL lets secure cookies round-trip between requests.
    """
    app = create_app(settings, db=db)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="https://test") as c:
        yield c
