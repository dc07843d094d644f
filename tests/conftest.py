"""Shared fixtures: a throwaway SQLite file database per test."""
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from playergate.app.core.config import Settings
from playergate.app.db.session import Database
from playergate.app.main import create_app
from playergate.app.security.hashing import Sha256Verifier
from playergate.app.services.auth import AuthService

SECRET = "testing_secret"


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path}/test.db"


@pytest_asyncio.fixture
async def database(db_url):
    db = Database(db_url)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def session(database):
    async with database.session() as session:
        yield session


@pytest.fixture
def verifier():
    return Sha256Verifier()


@pytest.fixture
def service(session, verifier):
    return AuthService(session, verifier, max_failed_attempts=3, lockout_minutes=15)


@pytest.fixture
def settings(db_url):
    return Settings(
        DATABASE_URL=db_url,
        SECRET_KEY=SECRET,
        CORS_ORIGINS="",
        RECOVERY_MAX_FAILED_ATTEMPTS=3,
    )


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as client:
        yield client
